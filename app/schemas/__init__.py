"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    TokenPayload,
    RefreshRequest,
    UserCreate,
    UserResponse,
)
from app.schemas.menu import (
    DishCreate,
    DishStockUpdate,
    DishResponse,
    DishVariantCreate,
    DishVariantResponse,
)
from app.schemas.time_slot import (
    TimeSlotCreate,
    TimeSlotResponse,
)
from app.schemas.promo import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeValidateRequest,
    PromoCodeValidation,
)
from app.schemas.payment import (
    PaymentCreate,
    PaymentResponse,
)
from app.schemas.order import (
    CustomerInfo,
    OrderCreate,
    OrderItemCreate,
    OrderStatusUpdate,
    OrderCancel,
    OrderFilters,
    OrderResponse,
    OrderSummaryResponse,
    OrderListResponse,
)
from app.schemas.business_settings import (
    BusinessSettingUpdate,
    BusinessSettingResponse,
)

__all__ = [
    "Token",
    "TokenPayload",
    "RefreshRequest",
    "UserCreate",
    "UserResponse",
    "DishCreate",
    "DishStockUpdate",
    "DishResponse",
    "DishVariantCreate",
    "DishVariantResponse",
    "TimeSlotCreate",
    "TimeSlotResponse",
    "PromoCodeCreate",
    "PromoCodeResponse",
    "PromoCodeValidateRequest",
    "PromoCodeValidation",
    "PaymentCreate",
    "PaymentResponse",
    "CustomerInfo",
    "OrderCreate",
    "OrderItemCreate",
    "OrderStatusUpdate",
    "OrderCancel",
    "OrderFilters",
    "OrderResponse",
    "OrderSummaryResponse",
    "OrderListResponse",
    "BusinessSettingUpdate",
    "BusinessSettingResponse",
]
