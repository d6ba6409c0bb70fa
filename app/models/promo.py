"""Promotion models"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Numeric,
    CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class PromoCode(Base):
    """Discount rule with a validity window, usage cap and minimum order"""
    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint(
            "(discount_percentage IS NULL) <> (discount_amount IS NULL)",
            name="ck_promo_codes_single_discount_kind",
        ),
        CheckConstraint(
            "discount_percentage IS NULL OR (discount_percentage >= 0 AND discount_percentage <= 100)",
            name="ck_promo_codes_percentage_range",
        ),
        CheckConstraint(
            "discount_amount IS NULL OR discount_amount > 0",
            name="ck_promo_codes_amount_positive",
        ),
        CheckConstraint("valid_from < valid_until", name="ck_promo_codes_window"),
        CheckConstraint(
            "max_uses IS NULL OR used_count <= max_uses",
            name="ck_promo_codes_usage_within_limit",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(50), unique=True, nullable=False)

    # Exactly one of these is set
    discount_percentage = Column(Numeric(5, 2))
    discount_amount = Column(Numeric(10, 2))

    minimum_order_amount = Column(Numeric(10, 2))
    max_uses = Column(Integer)  # NULL means unlimited
    used_count = Column(Integer, nullable=False, default=0)
    valid_from = Column(DateTime, nullable=False)
    valid_until = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    usages = relationship("OrderPromoUsage", back_populates="promo_code")

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.used_count >= self.max_uses

    def is_valid_at(self, moment: datetime) -> bool:
        return self.valid_from <= moment < self.valid_until


class OrderPromoUsage(Base):
    """Frozen record of the discount a promo code gave one order"""
    __tablename__ = "order_promo_codes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), unique=True, nullable=False)
    promo_code_id = Column(UUID(as_uuid=True), ForeignKey("promo_codes.id"), nullable=False)
    discount_applied = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="promo_usage")
    promo_code = relationship("PromoCode", back_populates="usages")
