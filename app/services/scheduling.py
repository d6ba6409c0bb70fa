"""Pickup time slot scheduling"""

from datetime import date, datetime, timedelta
from typing import List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import InvalidTimeRange, TimeSlotOverlap
from app.models.time_slot import TimeSlot
from app.schemas.time_slot import TimeSlotCreate

logger = structlog.get_logger()


# Advisory lock namespace for per-date slot creation
SLOT_DATE_LOCK = 7301


def slot_date_lock(slot_date: date):
    """Transaction-scoped lock that serializes slot creation for one date"""
    return select(func.pg_advisory_xact_lock(SLOT_DATE_LOCK, slot_date.toordinal()))


async def create_time_slot(db: AsyncSession, slot_data: TimeSlotCreate) -> TimeSlot:
    """Create a slot; slots on the same date may touch but not overlap"""
    if slot_data.end_time <= slot_data.start_time:
        raise InvalidTimeRange(
            "End time must be after start time",
            start_time=slot_data.start_time.isoformat(),
            end_time=slot_data.end_time.isoformat(),
        )

    try:
        # Advisory locks are PostgreSQL only
        if db.get_bind().dialect.name == "postgresql":
            await db.execute(slot_date_lock(slot_data.date))

        result = await db.execute(
            select(TimeSlot).where(
                TimeSlot.date == slot_data.date,
                TimeSlot.start_time < slot_data.end_time,
                TimeSlot.end_time > slot_data.start_time,
            )
        )
        existing = result.scalars().first()
        if existing is not None:
            raise TimeSlotOverlap(
                "Time slot overlaps with an existing slot",
                time_slot_id=str(existing.id),
            )

        slot = TimeSlot(**slot_data.model_dump())
        db.add(slot)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(slot)

    logger.info(
        "Time slot created",
        time_slot_id=str(slot.id),
        date=slot.date.isoformat(),
        start_time=slot.start_time.isoformat(),
        end_time=slot.end_time.isoformat(),
    )
    return slot


async def get_available_time_slots(
    db: AsyncSession,
    date_from: date,
    date_to: Optional[date] = None,
    preparation_time_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[TimeSlot]:
    """Bookable slots that end after the kitchen could have an order ready"""
    if date_to is None:
        date_to = date_from + timedelta(days=settings.slot_booking_window_days)
    if preparation_time_minutes is None:
        preparation_time_minutes = settings.default_preparation_minutes

    ready_at = (now or datetime.utcnow()) + timedelta(minutes=preparation_time_minutes)

    result = await db.execute(
        select(TimeSlot)
        .where(
            TimeSlot.date >= date_from,
            TimeSlot.date <= date_to,
            TimeSlot.is_available.is_(True),
            TimeSlot.current_bookings < TimeSlot.max_capacity,
        )
        .order_by(TimeSlot.date, TimeSlot.start_time)
    )
    return [slot for slot in result.scalars().all() if slot.ends_at() > ready_at]
