"""Time slot schemas"""

from datetime import date, datetime, time
from uuid import UUID
from pydantic import BaseModel, Field


class TimeSlotCreate(BaseModel):
    """Create time slot request"""
    date: date
    start_time: time
    end_time: time
    max_capacity: int = Field(..., gt=0)
    is_available: bool = True


class TimeSlotResponse(BaseModel):
    """Time slot response"""
    id: UUID
    date: date
    start_time: time
    end_time: time
    max_capacity: int
    current_bookings: int
    is_available: bool
    created_at: datetime

    class Config:
        from_attributes = True
