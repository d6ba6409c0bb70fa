"""Catalog models: dishes and their priced variants"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    Text,
    Numeric,
    Enum,
    CheckConstraint,
    Index,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class DishStatus(str, enum.Enum):
    """Orderability of a dish"""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    OUT_OF_STOCK = "out_of_stock"


class Dish(Base):
    """Menu dishes with optional stock tracking"""
    __tablename__ = "dishes"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_dishes_price_positive"),
        CheckConstraint(
            "stock_quantity IS NULL OR stock_quantity >= 0",
            name="ck_dishes_stock_non_negative",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    ingredients = Column(Text)
    allergens = Column(JSON, default=list)  # ["gluten", "nuts", ...]
    tags = Column(JSON, default=list)  # ["vegetarian", "spicy", ...]
    photo_url = Column(String(500))
    status = Column(
        Enum(DishStatus, name="dish_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DishStatus.AVAILABLE,
    )
    preparation_time_minutes = Column(Integer, nullable=False, default=20)

    # NULL means unlimited
    stock_quantity = Column(Integer)
    # Informational alert level only
    stock_threshold = Column(Integer)

    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    variants = relationship(
        "DishVariant",
        back_populates="dish",
        cascade="all, delete-orphan",
        order_by="DishVariant.created_at",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_stock_tracked(self) -> bool:
        return self.stock_quantity is not None

    def adjust_stock(self, delta: int) -> None:
        """Apply a stock delta, keeping status in step with the new level.

        Reaching zero marks the dish out of stock; a positive level revives
        an out-of-stock dish. Untracked dishes are left alone.
        """
        if self.stock_quantity is None:
            return
        new_quantity = self.stock_quantity + delta
        if new_quantity < 0:
            raise ValueError(
                f"Stock for dish {self.id} would become negative ({new_quantity})"
            )
        self.stock_quantity = new_quantity
        if new_quantity == 0:
            self.status = DishStatus.OUT_OF_STOCK
        elif self.status == DishStatus.OUT_OF_STOCK:
            self.status = DishStatus.AVAILABLE


class DishVariant(Base):
    """Sizes and supplements, priced as an offset on the dish price"""
    __tablename__ = "dish_variants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    dish_id = Column(UUID(as_uuid=True), ForeignKey("dishes.id"), nullable=False)
    name = Column(String(100), nullable=False)  # Large, Extra cheese
    price_modifier = Column(Numeric(10, 2), nullable=False, default=0)  # Can be negative
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    dish = relationship("Dish", back_populates="variants")

    __table_args__ = (
        # At most one default variant per dish
        Index(
            "uq_dish_variants_default",
            "dish_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
    )
