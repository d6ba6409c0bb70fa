"""Payments recorded against orders"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import OrderNotFound
from app.models.order import Order
from app.models.payment import Payment
from app.payments import BasePaymentGateway
from app.schemas.payment import PaymentCreate


async def create_payment(
    db: AsyncSession,
    gateway: BasePaymentGateway,
    order_id: UUID,
    payment_data: PaymentCreate,
) -> Payment:
    result = await db.execute(select(Order.id).where(Order.id == order_id))
    if result.scalar_one_or_none() is None:
        raise OrderNotFound(f"Order with id {order_id} not found", order_id=str(order_id))

    try:
        payment = await gateway.authorize(
            order_id,
            payment_data.amount,
            payment_data.tax_amount,
            payment_data.method,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(payment)
    return payment


async def capture_payment(db: AsyncSession, gateway: BasePaymentGateway, payment_id: UUID) -> Payment:
    try:
        payment = await gateway.capture(payment_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(payment)
    return payment
