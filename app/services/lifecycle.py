"""Order lifecycle.

Allowed transitions and their side effects live in one table. Effects run
inside the transaction that changes the status, so a transition and its
compensations (stock, slot, payments) commit or roll back together.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import is_concurrency_failure
from app.errors import (
    AlreadyCancelled,
    AlreadyPickedUp,
    ConcurrencyConflict,
    InvalidTransition,
    OrderNotFound,
)
from app.models.menu import Dish
from app.models.order import Order, OrderItem, OrderStatus
from app.models.payment import Payment, PaymentStatus
from app.models.time_slot import TimeSlot
from app.notifications.base import NotificationKind
from app.notifications.notifier import OrderNotifier
from app.payments import BasePaymentGateway, get_payment_gateway
from app.services.orders import find_containing_slot_id, get_order

logger = structlog.get_logger()

DEFAULT_CANCELLATION_NOTE = "Order cancelled"


@dataclass
class TransitionContext:
    db: AsyncSession
    order: Order
    gateway: BasePaymentGateway
    note: Optional[str] = None


TransitionEffect = Callable[[TransitionContext], Awaitable[None]]


async def _payment_ids(ctx: TransitionContext, statuses: Tuple[PaymentStatus, ...]):
    result = await ctx.db.execute(
        select(Payment.id)
        .where(Payment.order_id == ctx.order.id, Payment.status.in_(statuses))
        .order_by(Payment.created_at)
    )
    return list(result.scalars().all())


async def capture_pending_payments(ctx: TransitionContext) -> None:
    for payment_id in await _payment_ids(ctx, (PaymentStatus.PENDING,)):
        await ctx.gateway.capture(payment_id)


async def refund_payments(ctx: TransitionContext) -> None:
    statuses = (PaymentStatus.AUTHORIZED, PaymentStatus.CAPTURED)
    for payment_id in await _payment_ids(ctx, statuses):
        await ctx.gateway.refund(payment_id)


async def restore_stock(ctx: TransitionContext) -> None:
    result = await ctx.db.execute(
        select(OrderItem.dish_id, OrderItem.quantity).where(OrderItem.order_id == ctx.order.id)
    )
    quantities: Dict[UUID, int] = defaultdict(int)
    for dish_id, quantity in result.all():
        quantities[dish_id] += quantity

    if not quantities:
        return

    dishes = await ctx.db.execute(
        select(Dish)
        .where(Dish.id.in_(sorted(quantities)))
        .order_by(Dish.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    for dish in dishes.scalars().all():
        dish.adjust_stock(quantities[dish.id])


async def release_time_slot(ctx: TransitionContext) -> None:
    slot_id = ctx.order.time_slot_id
    if slot_id is None:
        slot_id = await find_containing_slot_id(ctx.db, ctx.order.pickup_slot)
    if slot_id is None:
        logger.warning("No time slot to release", order_id=str(ctx.order.id))
        return

    result = await ctx.db.execute(
        select(TimeSlot)
        .where(TimeSlot.id == slot_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    slot = result.scalar_one_or_none()
    if slot is not None:
        slot.release()


async def record_cancellation_note(ctx: TransitionContext) -> None:
    ctx.order.internal_notes = ctx.note or DEFAULT_CANCELLATION_NOTE


# Lock order: dishes, then the time slot, then payments
CANCELLATION_EFFECTS: Tuple[TransitionEffect, ...] = (
    restore_stock,
    release_time_slot,
    refund_payments,
    record_cancellation_note,
)

TRANSITIONS: Dict[OrderStatus, Dict[OrderStatus, Tuple[TransitionEffect, ...]]] = {
    OrderStatus.NEW: {
        OrderStatus.PREPARING: (),
        OrderStatus.CANCELLED: CANCELLATION_EFFECTS,
    },
    OrderStatus.PREPARING: {
        OrderStatus.READY: (capture_pending_payments,),
        OrderStatus.CANCELLED: CANCELLATION_EFFECTS,
    },
    OrderStatus.READY: {
        OrderStatus.PICKED_UP: (),
        OrderStatus.CANCELLED: CANCELLATION_EFFECTS,
    },
    OrderStatus.PICKED_UP: {},
    OrderStatus.CANCELLED: {},
}

NOTIFY_ON_ENTER = {
    OrderStatus.READY: NotificationKind.READY,
    OrderStatus.CANCELLED: NotificationKind.CANCELLED,
}


def effects_for(current: OrderStatus, requested: OrderStatus) -> Tuple[TransitionEffect, ...]:
    """Side effects of ``current -> requested``; raises if the move is not allowed"""
    allowed = TRANSITIONS.get(current, {})
    if requested not in allowed:
        raise InvalidTransition(current.value, requested.value)
    return allowed[requested]


class OrderLifecycleManager:
    """Move orders through their lifecycle"""

    def __init__(
        self,
        db: AsyncSession,
        gateway: Optional[BasePaymentGateway] = None,
        notifier: Optional[OrderNotifier] = None,
    ):
        self.db = db
        self.gateway = gateway or get_payment_gateway(db)
        self.notifier = notifier

    async def update_status(
        self,
        order_id: UUID,
        status: Optional[OrderStatus] = None,
        internal_notes: Optional[str] = None,
    ) -> Order:
        """Apply a status transition and/or replace the staff note.

        Without a status only the note changes and no side effects run.
        """

        async def change(order: Order) -> Optional[OrderStatus]:
            if status is None:
                if internal_notes is not None:
                    order.internal_notes = internal_notes
                return None
            await self._transition(order, status, internal_notes)
            return status

        return await self._apply(order_id, change)

    async def cancel(self, order_id: UUID, reason: Optional[str] = None) -> Order:
        """Cancel an order, restoring stock, slot capacity and payments"""

        async def change(order: Order) -> OrderStatus:
            if order.status == OrderStatus.CANCELLED:
                raise AlreadyCancelled("Order is already cancelled", order_id=str(order.id))
            if order.status == OrderStatus.PICKED_UP:
                raise AlreadyPickedUp(
                    "Cannot cancel an order that has been picked up",
                    order_id=str(order.id),
                )
            await self._transition(order, OrderStatus.CANCELLED, reason)
            return OrderStatus.CANCELLED

        return await self._apply(order_id, change)

    async def _apply(
        self,
        order_id: UUID,
        change: Callable[[Order], Awaitable[Optional[OrderStatus]]],
    ) -> Order:
        try:
            order = await self._lock_order(order_id)
            previous = order.status
            entered = await change(order)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            if not is_concurrency_failure(e):
                raise
            logger.warning(
                "Order update conflicted with a concurrent change",
                order_id=str(order_id),
                error=str(e),
            )
            raise ConcurrencyConflict(
                "The order was changed concurrently, please retry",
                order_id=str(order_id),
            ) from e

        order = await get_order(self.db, order_id)

        if entered is not None:
            logger.info(
                "Order status changed",
                order_id=str(order.id),
                order_number=order.order_number,
                from_status=previous.value,
                to_status=entered.value,
            )
            kind = NOTIFY_ON_ENTER.get(entered)
            if kind is not None and self.notifier is not None:
                reason = order.internal_notes if entered == OrderStatus.CANCELLED else None
                self.notifier.notify(order, kind, reason=reason)

        return order

    async def _lock_order(self, order_id: UUID) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFound(f"Order with id {order_id} not found", order_id=str(order_id))
        return order

    async def _transition(
        self,
        order: Order,
        target: OrderStatus,
        note: Optional[str] = None,
    ) -> None:
        effects = effects_for(order.status, target)
        ctx = TransitionContext(db=self.db, order=order, gateway=self.gateway, note=note)
        for effect in effects:
            await effect(ctx)

        order.status = target
        if note is not None and target != OrderStatus.CANCELLED:
            order.internal_notes = note
