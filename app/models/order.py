"""Order models"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Union
from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Numeric,
    Enum,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Order lifecycle states"""
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class GuestOwner:
    """Order placed through guest checkout"""
    customer_id: uuid.UUID


@dataclass(frozen=True)
class RegisteredOwner:
    """Order placed by a registered account"""
    user_id: uuid.UUID


OrderOwner = Union[GuestOwner, RegisteredOwner]


class Customer(Base):
    """Guest checkout contact details, one row per guest order"""
    __tablename__ = "customers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    orders = relationship("Order", back_populates="customer")


class Order(Base):
    """Click-and-collect orders"""
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "(customer_id IS NULL) <> (user_id IS NULL)",
            name="ck_orders_single_owner",
        ),
        CheckConstraint(
            "total_amount >= 0 AND tax_amount >= 0",
            name="ck_orders_amounts_non_negative",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(50), unique=True, nullable=False)

    # Owner: exactly one of these is set
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"))
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    is_guest_order = Column(Boolean, nullable=False, default=False)

    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.NEW,
    )

    # Timing
    pickup_slot = Column(DateTime, nullable=False)
    time_slot_id = Column(UUID(as_uuid=True), ForeignKey("time_slots.id"))

    # Pricing
    total_amount = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)

    # Notes
    special_notes = Column(Text)  # From the customer
    internal_notes = Column(Text)  # From staff

    # Pickup verification
    qr_code = Column(String(80), unique=True, nullable=False)

    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    customer = relationship("Customer", back_populates="orders")
    user = relationship("User", back_populates="orders")
    time_slot = relationship("TimeSlot")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    payments = relationship("Payment", back_populates="order", order_by="Payment.created_at")
    promo_usage = relationship("OrderPromoUsage", back_populates="order", uselist=False)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def owner(self) -> OrderOwner:
        if self.customer_id is not None:
            return GuestOwner(customer_id=self.customer_id)
        return RegisteredOwner(user_id=self.user_id)

    def assign_owner(self, owner: OrderOwner) -> None:
        if isinstance(owner, GuestOwner):
            self.customer_id = owner.customer_id
            self.user_id = None
            self.is_guest_order = True
        else:
            self.user_id = owner.user_id
            self.customer_id = None
            self.is_guest_order = False


class OrderItem(Base):
    """Order line; prices are captured at placement and never change"""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False)
    dish_id = Column(UUID(as_uuid=True), ForeignKey("dishes.id"), nullable=False)
    variant_id = Column(UUID(as_uuid=True), ForeignKey("dish_variants.id"))
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    special_requests = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="items")
    dish = relationship("Dish")
    variant = relationship("DishVariant")
