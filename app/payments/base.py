"""Base payment gateway interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PaymentNotFound, PaymentStateError
from app.models.payment import Payment, PaymentMethod, PaymentStatus


class BasePaymentGateway(ABC):
    """Abstract base class for payment gateways.

    Gateways work inside the caller's session so that payment state changes
    commit or roll back together with the order change that triggered them.
    """

    name = "base"

    def __init__(self, db: AsyncSession):
        self.db = db

    @abstractmethod
    async def authorize(
        self,
        order_id: UUID,
        amount: Decimal,
        tax_amount: Decimal,
        method: PaymentMethod,
    ) -> Payment:
        """Open a payment for an order (status pending or authorized)"""
        pass

    @abstractmethod
    async def capture(self, payment_id: UUID) -> Payment:
        """Settle a pending or authorized payment"""
        pass

    @abstractmethod
    async def refund(self, payment_id: UUID) -> Payment:
        """Return an authorized or captured payment"""
        pass

    async def _get_payment(self, payment_id: UUID) -> Payment:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.id == payment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            raise PaymentNotFound(f"Payment {payment_id} not found", payment_id=str(payment_id))
        return payment

    @staticmethod
    def _require_status(payment: Payment, allowed: tuple, action: str) -> None:
        if payment.status not in allowed:
            raise PaymentStateError(
                f"Cannot {action} payment in status {payment.status.value}",
                payment_id=str(payment.id),
                status=payment.status.value,
            )


CAPTURABLE = (PaymentStatus.PENDING, PaymentStatus.AUTHORIZED)
REFUNDABLE = (PaymentStatus.AUTHORIZED, PaymentStatus.CAPTURED)
