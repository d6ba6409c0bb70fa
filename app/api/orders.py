"""Order API endpoints"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.order import OrderStatus
from app.models.payment import Payment
from app.models.user import User, UserRole
from app.notifications import OrderNotifier, get_notifier
from app.payments import get_payment_gateway
from app.schemas.order import (
    OrderCancel,
    OrderCreate,
    OrderFilters,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from app.schemas.payment import PaymentCreate, PaymentResponse
from app.services import orders as order_reads
from app.services.lifecycle import OrderLifecycleManager
from app.services.payments import create_payment
from app.services.placement import OrderPlacementEngine
from app.api.auth import require_role

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=201)
async def place_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    """Place a pickup order (guest checkout or registered user)"""
    engine = OrderPlacementEngine(db, get_payment_gateway(db), notifier)
    return await engine.place(order_data)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    pickup_date: Optional[date] = None,
    customer_search: Optional[str] = None,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """List orders with pagination"""
    filters = OrderFilters(
        status=status,
        date_from=date_from,
        date_to=date_to,
        pickup_date=pickup_date,
        customer_search=customer_search,
    )
    orders, total = await order_reads.list_orders(db, filters, page, page_size)
    return OrderListResponse(items=orders, total=total, page=page, page_size=page_size)


@router.get("/lookup/{code}", response_model=OrderResponse)
async def lookup_order(
    code: str,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """Find an order by order number or pickup QR code"""
    return await order_reads.lookup_order(db, code)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """Get order details"""
    return await order_reads.get_order(db, order_id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    update_data: OrderStatusUpdate,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    """Move an order through its lifecycle and/or update the staff note"""
    manager = OrderLifecycleManager(db, get_payment_gateway(db), notifier)
    return await manager.update_status(order_id, update_data.status, update_data.internal_notes)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID,
    cancel_data: OrderCancel,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
):
    """Cancel an order"""
    manager = OrderLifecycleManager(db, get_payment_gateway(db), notifier)
    return await manager.cancel(order_id, cancel_data.reason)


@router.get("/{order_id}/payments", response_model=List[PaymentResponse])
async def list_order_payments(
    order_id: UUID,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """List payments recorded for an order"""
    await order_reads.get_order(db, order_id)
    result = await db.execute(
        select(Payment).where(Payment.order_id == order_id).order_by(Payment.created_at)
    )
    return result.scalars().all()


@router.post("/{order_id}/payments", response_model=PaymentResponse, status_code=201)
async def add_payment(
    order_id: UUID,
    payment_data: PaymentCreate,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """Record a payment against an order"""
    return await create_payment(db, get_payment_gateway(db), order_id, payment_data)
