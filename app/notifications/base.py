"""Base notification channel interface and message templates"""

import enum
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class NotificationKind(str, enum.Enum):
    CONFIRMATION = "confirmation"
    READY = "ready"
    CANCELLED = "cancelled"


class NotificationResult(BaseModel):
    """Outcome of a notification attempt"""
    success: bool
    error: Optional[str] = None
    reference: Optional[str] = None


class BaseNotificationChannel(ABC):
    """Abstract base class for delivery channels"""

    name = "base"

    @abstractmethod
    def send(self, to: str, message: str) -> NotificationResult:
        """Deliver ``message`` to ``to``"""
        pass


def render_message(
    kind: NotificationKind,
    business_name: str,
    order_number: str,
    pickup_slot: datetime,
    total_amount: Decimal,
    reason: Optional[str] = None,
) -> str:
    """Build the customer-facing text for an order event"""
    pickup = pickup_slot.strftime("%A, %B %d at %I:%M %p")

    if kind == NotificationKind.CONFIRMATION:
        message = f"Thank you for your order from {business_name}! "
        message += f"Order {order_number}. "
        message += f"Total: ${total_amount:.2f}. "
        message += f"Pickup {pickup}. Show code QR-{order_number} at the counter."
    elif kind == NotificationKind.READY:
        message = f"Your order {order_number} from {business_name} is ready for pickup! "
        message += f"Show code QR-{order_number} at the counter."
    else:
        message = f"Your order {order_number} from {business_name} has been cancelled."
        if reason:
            message += f" Reason: {reason}."
        message += " Any payment taken will be refunded."

    return message
