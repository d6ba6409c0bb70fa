"""Simulated payment gateway.

Mirrors the state changes a card processor would report without calling
one: online payments are authorized immediately, on-site payments stay
pending until captured at the counter.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from uuid import UUID

import structlog

from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.payments.base import BasePaymentGateway, CAPTURABLE, REFUNDABLE

logger = structlog.get_logger()


def _transaction_reference(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:24]}"


class SimulatedPaymentGateway(BasePaymentGateway):
    """In-process gateway used for development and on-site payments"""

    name = "simulated"

    async def authorize(
        self,
        order_id: UUID,
        amount: Decimal,
        tax_amount: Decimal,
        method: PaymentMethod,
    ) -> Payment:
        payment = Payment(
            order_id=order_id,
            amount=amount,
            tax_amount=tax_amount,
            method=method,
            status=PaymentStatus.PENDING,
        )
        if method == PaymentMethod.ONLINE:
            payment.status = PaymentStatus.AUTHORIZED
            payment.transaction_id = _transaction_reference("auth")

        self.db.add(payment)
        await self.db.flush()

        logger.info(
            "Payment opened",
            payment_id=str(payment.id),
            order_id=str(order_id),
            method=method.value,
            status=payment.status.value,
        )
        return payment

    async def capture(self, payment_id: UUID) -> Payment:
        payment = await self._get_payment(payment_id)
        self._require_status(payment, CAPTURABLE, "capture")

        payment.status = PaymentStatus.CAPTURED
        payment.processed_at = datetime.utcnow()
        if not payment.transaction_id:
            payment.transaction_id = _transaction_reference("cap")

        logger.info("Payment captured", payment_id=str(payment.id), order_id=str(payment.order_id))
        return payment

    async def refund(self, payment_id: UUID) -> Payment:
        payment = await self._get_payment(payment_id)
        self._require_status(payment, REFUNDABLE, "refund")

        payment.status = PaymentStatus.REFUNDED
        payment.processed_at = datetime.utcnow()

        logger.info("Payment refunded", payment_id=str(payment.id), order_id=str(payment.order_id))
        return payment
