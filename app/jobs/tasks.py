"""Background job tasks"""

from typing import Optional
from uuid import UUID
import asyncio
import structlog

from app.jobs.celery_app import celery_app
from app.config import settings
from app.notifications.base import BaseNotificationChannel, NotificationKind, NotificationResult

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


async def deliver_order_notification(
    db,
    order_id: UUID,
    kind: NotificationKind,
    reason: Optional[str] = None,
    channel: Optional[BaseNotificationChannel] = None,
) -> NotificationResult:
    """Render and send one order notification to the order's owner"""
    from sqlalchemy import select
    from sqlalchemy.orm import selectinload

    from app.models.order import Order
    from app.notifications import get_channel, render_message

    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.customer), selectinload(Order.user))
    )
    order = result.scalar_one_or_none()

    if order is None:
        logger.warning("Notification skipped, order not found", order_id=str(order_id))
        return NotificationResult(success=False, error="Order not found")

    contact = order.customer if order.is_guest_order else order.user
    phone = contact.phone if contact is not None else None
    if not phone:
        logger.warning("Notification skipped, no phone number", order_id=str(order_id))
        return NotificationResult(success=False, error="No phone number")

    message = render_message(
        kind,
        business_name=settings.business_name,
        order_number=order.order_number,
        pickup_slot=order.pickup_slot,
        total_amount=order.total_amount,
        reason=reason,
    )

    channel = channel or get_channel()
    outcome = channel.send(phone, message)

    if outcome.success:
        logger.info(
            "Order notification sent",
            order_id=str(order_id),
            kind=kind.value,
            channel=channel.name,
        )
    else:
        logger.error(
            "Order notification failed",
            order_id=str(order_id),
            kind=kind.value,
            channel=channel.name,
            error=outcome.error,
        )
    return outcome


@celery_app.task(name="send_order_notification")
def send_order_notification(order_id: str, kind: str, reason: Optional[str] = None):
    """Send a confirmation, ready or cancellation message for an order"""
    logger.info("Sending order notification", order_id=order_id, kind=kind)

    async def _send():
        from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
        from sqlalchemy.pool import NullPool

        # Each task runs its own event loop, so it cannot share the API engine's pool
        engine = create_async_engine(settings.database_url, poolclass=NullPool)
        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        try:
            async with session_factory() as db:
                outcome = await deliver_order_notification(
                    db, UUID(order_id), NotificationKind(kind), reason
                )
        finally:
            await engine.dispose()
        return outcome.model_dump()

    try:
        return run_async(_send())
    except Exception as e:
        logger.error("Order notification task failed", order_id=order_id, kind=kind, error=str(e))
        return {"success": False, "error": str(e), "reference": None}
