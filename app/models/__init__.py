"""Database models"""

from app.models.user import User, UserRole
from app.models.menu import Dish, DishVariant, DishStatus
from app.models.time_slot import TimeSlot
from app.models.promo import PromoCode, OrderPromoUsage
from app.models.order import (
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    GuestOwner,
    RegisteredOwner,
)
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.models.business_settings import BusinessSetting

__all__ = [
    "User",
    "UserRole",
    "Dish",
    "DishVariant",
    "DishStatus",
    "TimeSlot",
    "PromoCode",
    "OrderPromoUsage",
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
    "GuestOwner",
    "RegisteredOwner",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "BusinessSetting",
]
