"""Customer notifications"""

from typing import Optional

from app.config import settings
from app.notifications.base import (
    BaseNotificationChannel,
    NotificationKind,
    NotificationResult,
    render_message,
)
from app.notifications.notifier import OrderNotifier, get_notifier


def get_channel(name: Optional[str] = None) -> BaseNotificationChannel:
    """Factory function to create the configured delivery channel"""
    from app.notifications.log import LogChannel
    from app.notifications.sms import TwilioSMSChannel

    channels = {
        "sms": TwilioSMSChannel,
        "log": LogChannel,
    }

    channel_name = name or settings.notification_channel
    channel_class = channels.get(channel_name)
    if not channel_class:
        raise ValueError(f"Unknown notification channel: {channel_name}")
    return channel_class()


__all__ = [
    "BaseNotificationChannel",
    "NotificationKind",
    "NotificationResult",
    "OrderNotifier",
    "get_channel",
    "get_notifier",
    "render_message",
]
