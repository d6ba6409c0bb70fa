"""Twilio SMS channel"""

from twilio.rest import Client as TwilioClient
import structlog

from app.config import settings
from app.notifications.base import BaseNotificationChannel, NotificationResult

logger = structlog.get_logger()


class TwilioSMSChannel(BaseNotificationChannel):
    """Send notifications as SMS through Twilio"""

    name = "sms"

    def __init__(self):
        self.client = TwilioClient(settings.twilio_account_sid, settings.twilio_auth_token)

    def send(self, to: str, message: str) -> NotificationResult:
        logger.info("Sending SMS", to=to[-4:])  # Log last 4 digits only

        try:
            sent = self.client.messages.create(
                body=message,
                from_=settings.twilio_phone_number,
                to=to,
            )
            return NotificationResult(success=True, reference=sent.sid)

        except Exception as e:
            logger.error("Failed to send SMS", error=str(e))
            return NotificationResult(success=False, error=str(e))
