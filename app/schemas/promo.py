"""Promo code schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from app.schemas.datetimes import to_utc_naive


class PromoCodeCreate(BaseModel):
    """Create promo code request"""
    code: str = Field(..., min_length=1, max_length=50)
    discount_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    discount_amount: Optional[Decimal] = Field(None, gt=0)
    minimum_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, gt=0)
    valid_from: datetime
    valid_until: datetime

    @field_validator("valid_from", "valid_until")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return to_utc_naive(value)


class PromoCodeResponse(BaseModel):
    """Promo code response"""
    id: UUID
    code: str
    discount_percentage: Optional[Decimal]
    discount_amount: Optional[Decimal]
    minimum_order_amount: Optional[Decimal]
    max_uses: Optional[int]
    used_count: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PromoCodeValidateRequest(BaseModel):
    """Promo code preview request"""
    code: str
    order_amount: Decimal = Field(..., ge=0)


class PromoCodeValidation(BaseModel):
    """Promo code preview result"""
    valid: bool
    discount: Optional[Decimal] = None
    error: Optional[str] = None
    promo_code: Optional[PromoCodeResponse] = None
