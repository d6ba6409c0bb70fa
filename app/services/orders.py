"""Order reads and identifiers"""

import secrets
import time
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import OrderNotFound
from app.models.order import Customer, Order
from app.models.user import User
from app.schemas.order import OrderFilters

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_order_number() -> str:
    """ORD-<epoch millis>-<9 random base36 characters>"""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return f"ORD-{millis}-{suffix}"


def qr_code_for(order_number: str) -> str:
    return f"QR-{order_number}"


def _with_details(query):
    return query.options(
        selectinload(Order.items),
        selectinload(Order.payments),
        selectinload(Order.promo_usage),
    ).execution_options(populate_existing=True)


async def get_order(db: AsyncSession, order_id: UUID) -> Order:
    """Load an order with its items, payments and promo usage"""
    result = await db.execute(_with_details(select(Order).where(Order.id == order_id)))
    order = result.scalar_one_or_none()
    if order is None:
        raise OrderNotFound(f"Order with id {order_id} not found", order_id=str(order_id))
    return order


async def lookup_order(db: AsyncSession, code: str) -> Order:
    """Find an order by its order number or pickup QR code"""
    result = await db.execute(
        _with_details(
            select(Order).where(or_(Order.order_number == code, Order.qr_code == code))
        )
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise OrderNotFound(f"No order matches code {code}", code=code)
    return order


async def list_orders(
    db: AsyncSession,
    filters: OrderFilters,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Order], int]:
    query = (
        select(Order)
        .outerjoin(Customer, Order.customer_id == Customer.id)
        .outerjoin(User, Order.user_id == User.id)
    )
    conditions = []

    if filters.status:
        conditions.append(Order.status == filters.status)

    if filters.date_from:
        conditions.append(Order.created_at >= filters.date_from)

    if filters.date_to:
        conditions.append(Order.created_at <= filters.date_to)

    if filters.pickup_date:
        day_start = datetime.combine(filters.pickup_date, datetime.min.time())
        conditions.append(Order.pickup_slot >= day_start)
        conditions.append(Order.pickup_slot < day_start + timedelta(days=1))

    if filters.customer_search:
        term = f"%{filters.customer_search}%"
        conditions.append(
            or_(
                Customer.first_name.ilike(term),
                Customer.last_name.ilike(term),
                Customer.email.ilike(term),
                Customer.phone.ilike(term),
                User.first_name.ilike(term),
                User.last_name.ilike(term),
                User.email.ilike(term),
                User.phone.ilike(term),
                Order.order_number.ilike(term),
            )
        )

    if conditions:
        query = query.where(*conditions)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar()

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(Order.created_at.desc()).offset(offset).limit(page_size)
    )
    return list(result.scalars().all()), total


async def find_containing_slot_id(db: AsyncSession, pickup_slot: datetime) -> Optional[UUID]:
    """Id of the slot whose window contains ``pickup_slot``, if any"""
    from app.models.time_slot import TimeSlot

    result = await db.execute(
        select(TimeSlot.id)
        .where(
            TimeSlot.date == pickup_slot.date(),
            TimeSlot.start_time <= pickup_slot.time(),
            TimeSlot.end_time > pickup_slot.time(),
        )
        .order_by(TimeSlot.start_time)
        .limit(1)
    )
    return result.scalar_one_or_none()
