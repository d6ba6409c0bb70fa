"""Payment schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.payment import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    """Create payment request"""
    amount: Decimal = Field(..., gt=0)
    tax_amount: Decimal = Field(..., ge=0)
    method: PaymentMethod


class PaymentResponse(BaseModel):
    """Payment response"""
    id: UUID
    order_id: UUID
    amount: Decimal
    tax_amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str]
    processed_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True
