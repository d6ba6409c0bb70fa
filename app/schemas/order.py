"""Order schemas"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.order import OrderStatus
from app.models.payment import PaymentMethod
from app.schemas.datetimes import to_utc_naive, to_wall_clock
from app.schemas.payment import PaymentResponse


class CustomerInfo(BaseModel):
    """Guest checkout contact details"""
    email: EmailStr
    phone: str
    first_name: str
    last_name: str


class OrderItemCreate(BaseModel):
    """Order line request.

    ``unit_price`` is accepted for client display purposes only; the charged
    price is always recomputed from the catalog.
    """
    dish_id: UUID
    variant_id: Optional[UUID] = None
    quantity: int = Field(..., gt=0)
    unit_price: Optional[Decimal] = None
    special_requests: Optional[str] = None


class OrderCreate(BaseModel):
    """Place order request"""
    customer_info: Optional[CustomerInfo] = None
    user_id: Optional[UUID] = None
    pickup_slot: datetime
    special_notes: Optional[str] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)
    promo_code: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None

    @field_validator("pickup_slot")
    @classmethod
    def _to_wall_clock(cls, value: datetime) -> datetime:
        return to_wall_clock(value)


class OrderStatusUpdate(BaseModel):
    """Status change and/or staff note update"""
    status: Optional[OrderStatus] = None
    internal_notes: Optional[str] = None


class OrderCancel(BaseModel):
    """Cancellation request"""
    reason: Optional[str] = None


class OrderFilters(BaseModel):
    """Order list filters"""
    status: Optional[OrderStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    pickup_date: Optional[date] = None
    customer_search: Optional[str] = None

    @field_validator("date_from", "date_to")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc_naive(value)


class OrderItemResponse(BaseModel):
    """Order item in response"""
    id: UUID
    dish_id: UUID
    variant_id: Optional[UUID]
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    special_requests: Optional[str]

    class Config:
        from_attributes = True


class PromoUsageResponse(BaseModel):
    """Discount applied to an order"""
    promo_code_id: UUID
    discount_applied: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    order_number: str
    customer_id: Optional[UUID]
    user_id: Optional[UUID]
    is_guest_order: bool
    status: OrderStatus
    pickup_slot: datetime
    time_slot_id: Optional[UUID]
    total_amount: Decimal
    tax_amount: Decimal
    special_notes: Optional[str]
    internal_notes: Optional[str]
    qr_code: str
    items: List[OrderItemResponse] = []
    payments: List[PaymentResponse] = []
    promo_usage: Optional[PromoUsageResponse] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderSummaryResponse(BaseModel):
    """Order row in list views"""
    id: UUID
    order_number: str
    is_guest_order: bool
    status: OrderStatus
    pickup_slot: datetime
    total_amount: Decimal
    tax_amount: Decimal
    special_notes: Optional[str]
    internal_notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Paginated order list"""
    items: List[OrderSummaryResponse]
    total: int
    page: int
    page_size: int
