"""Order notification dispatch"""

from typing import Optional

import structlog

from app.config import settings
from app.models.order import Order
from app.notifications.base import NotificationKind, NotificationResult

logger = structlog.get_logger()


class OrderNotifier:
    """
    Queue customer notifications for order events.
    Delivery runs in a Celery worker; notify() never raises and never
    affects the order transaction that triggered it.
    """

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = settings.notifications_enabled if enabled is None else enabled

    def notify(
        self,
        order: Order,
        kind: NotificationKind,
        reason: Optional[str] = None,
    ) -> NotificationResult:
        if not self.enabled:
            return NotificationResult(success=False, error="Notifications disabled")

        try:
            from app.jobs.tasks import send_order_notification

            job = send_order_notification.delay(str(order.id), kind.value, reason)
            logger.info(
                "Order notification queued",
                order_id=str(order.id),
                order_number=order.order_number,
                kind=kind.value,
            )
            return NotificationResult(success=True, reference=job.id)

        except Exception as e:
            logger.warning(
                "Failed to queue order notification",
                order_id=str(order.id),
                kind=kind.value,
                error=str(e),
            )
            return NotificationResult(success=False, error=str(e))


def get_notifier() -> OrderNotifier:
    """Dependency returning the application notifier"""
    return OrderNotifier()
