"""Datetime handling for the naive timestamp columns"""

from datetime import datetime, timezone
from typing import Optional


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Instants (promo windows, order list filters) are stored as naive UTC"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    """Pickup times are business wall-clock times; any offset is dropped"""
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value
