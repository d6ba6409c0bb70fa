"""Pickup time slot model"""

import uuid
from datetime import datetime, time
from sqlalchemy import Column, Integer, Boolean, Date, Time, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class TimeSlot(Base):
    """Bounded pickup window with a booking capacity"""
    __tablename__ = "time_slots"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_time_slots_range"),
        CheckConstraint("max_capacity > 0", name="ck_time_slots_capacity_positive"),
        CheckConstraint(
            "current_bookings >= 0 AND current_bookings <= max_capacity",
            name="ck_time_slots_bookings_within_capacity",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    max_capacity = Column(Integer, nullable=False)
    current_bookings = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_full(self) -> bool:
        return self.current_bookings >= self.max_capacity

    @property
    def remaining_capacity(self) -> int:
        return max(0, self.max_capacity - self.current_bookings)

    def contains(self, moment: datetime) -> bool:
        """Whether ``moment`` falls in [start_time, end_time) on this slot's date"""
        return moment.date() == self.date and self.start_time <= moment.time() < self.end_time

    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    def ends_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    def book(self) -> None:
        if self.is_full:
            raise ValueError(f"Time slot {self.id} is already at capacity")
        self.current_bookings += 1

    def release(self) -> None:
        self.current_bookings = max(0, self.current_bookings - 1)


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval overlap: [start_a, end_a) and [start_b, end_b)"""
    return start_a < end_b and start_b < end_a

