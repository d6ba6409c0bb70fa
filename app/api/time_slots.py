"""Pickup time slot API endpoints"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.time_slot import TimeSlot
from app.models.user import User, UserRole
from app.schemas.time_slot import TimeSlotCreate, TimeSlotResponse
from app.services import scheduling
from app.api.auth import require_role

router = APIRouter()


@router.get("/available", response_model=List[TimeSlotResponse])
async def get_available_time_slots(
    date_from: date,
    date_to: Optional[date] = None,
    preparation_time_minutes: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Slots a customer can still book for pickup"""
    return await scheduling.get_available_time_slots(
        db,
        date_from=date_from,
        date_to=date_to,
        preparation_time_minutes=preparation_time_minutes,
    )


@router.get("", response_model=List[TimeSlotResponse])
async def list_time_slots(
    slot_date: Optional[date] = Query(None, alias="date"),
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """List all slots, including full and closed ones"""
    query = select(TimeSlot).order_by(TimeSlot.date, TimeSlot.start_time)
    if slot_date:
        query = query.where(TimeSlot.date == slot_date)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=TimeSlotResponse, status_code=201)
async def create_time_slot(
    slot_data: TimeSlotCreate,
    current_user: User = Depends(require_role(UserRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a pickup time slot"""
    return await scheduling.create_time_slot(db, slot_data)
