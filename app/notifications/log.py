"""Log-only channel for development"""

import structlog

from app.notifications.base import BaseNotificationChannel, NotificationResult

logger = structlog.get_logger()


class LogChannel(BaseNotificationChannel):
    """Write notifications to the log instead of delivering them"""

    name = "log"

    def send(self, to: str, message: str) -> NotificationResult:
        logger.info("Notification", to=to[-4:], message=message)
        return NotificationResult(success=True)
