"""Order placement.

Placement validates the whole request before writing anything, then
applies every side effect (stock, slot booking, promo usage, order rows,
payment) in one transaction. Rows that placement reads and later changes
are locked in a fixed order: dishes by id, then the promo code, then the
time slot.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import is_concurrency_failure
from app.errors import (
    ConcurrencyConflict,
    DishNotFound,
    DishUnavailable,
    InsufficientStock,
    NoAvailableSlot,
    OwnerRequired,
    PromoCodeInvalid,
    SlotFullyBooked,
    UserNotFound,
    VariantNotFound,
)
from app.models.menu import Dish, DishStatus, DishVariant
from app.models.order import Customer, GuestOwner, Order, OrderItem, OrderOwner, OrderStatus, RegisteredOwner
from app.models.promo import OrderPromoUsage, PromoCode
from app.models.time_slot import TimeSlot
from app.models.user import User
from app.notifications.base import NotificationKind
from app.notifications.notifier import OrderNotifier
from app.payments import BasePaymentGateway, get_payment_gateway
from app.schemas.datetimes import to_wall_clock
from app.schemas.order import OrderCreate, OrderItemCreate
from app.services.business_settings import get_tax_rate
from app.services.orders import generate_order_number, get_order, qr_code_for
from app.services.pricing import (
    ZERO,
    OrderTotals,
    check_promo_code,
    compute_discount,
    compute_totals,
    to_money,
    unit_price,
)

logger = structlog.get_logger()


@dataclass
class PricedLine:
    """A validated request line with its server-side price"""
    position: int
    dish: Dish
    variant: Optional[DishVariant]
    quantity: int
    unit_price: Decimal
    special_requests: Optional[str] = None

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderPlacementEngine:
    """Validate and place pickup orders atomically"""

    def __init__(
        self,
        db: AsyncSession,
        gateway: Optional[BasePaymentGateway] = None,
        notifier: Optional[OrderNotifier] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.gateway = gateway or get_payment_gateway(db)
        self.notifier = notifier
        self.clock = clock

    async def place(self, order_data: OrderCreate) -> Order:
        """Place an order; on any error nothing is persisted"""
        try:
            order_id = await self._place(order_data)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            if not is_concurrency_failure(e):
                raise
            logger.warning("Order placement conflicted with a concurrent change", error=str(e))
            raise ConcurrencyConflict(
                "The order could not be placed because of a concurrent change, please retry"
            ) from e

        order = await get_order(self.db, order_id)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
            items=len(order.items),
        )

        if self.notifier is not None:
            self.notifier.notify(order, NotificationKind.CONFIRMATION)

        return order

    async def _place(self, data: OrderCreate) -> UUID:
        now = self.clock()
        pickup_slot = to_wall_clock(data.pickup_slot)

        # Validation: nothing below writes until every check has passed
        user = await self._resolve_user(data)
        dishes = await self._lock_dishes(item.dish_id for item in data.items)
        lines = await self._price_lines(data.items, dishes)
        subtotal = sum((line.total_price for line in lines), ZERO)

        promo, discount = await self._apply_promo_code(data.promo_code, subtotal, now)
        tax_rate = await get_tax_rate(self.db)
        totals = compute_totals(subtotal, discount, tax_rate)

        slot = await self._lock_time_slot(pickup_slot)

        # Writes
        owner = await self._create_owner(data, user)

        for line in lines:
            line.dish.adjust_stock(-line.quantity)

        slot.book()

        order = self._build_order(data, owner, pickup_slot, slot, lines, totals)
        self.db.add(order)

        if promo is not None:
            promo.used_count += 1
            self.db.add(
                OrderPromoUsage(
                    order=order,
                    promo_code_id=promo.id,
                    discount_applied=to_money(discount),
                )
            )

        await self.db.flush()

        if data.payment_method is not None:
            await self.gateway.authorize(
                order.id,
                order.total_amount,
                order.tax_amount,
                data.payment_method,
            )

        return order.id

    async def _resolve_user(self, data: OrderCreate) -> Optional[User]:
        """Registered owner if ``user_id`` is given, otherwise None for guest checkout"""
        if data.user_id is not None:
            result = await self.db.execute(
                select(User).where(User.id == data.user_id, User.is_active.is_(True))
            )
            user = result.scalar_one_or_none()
            if user is None:
                raise UserNotFound(f"User with id {data.user_id} not found", user_id=str(data.user_id))
            return user

        if data.customer_info is None:
            raise OwnerRequired("Either user_id or customer_info is required")
        return None

    async def _lock_dishes(self, dish_ids: Iterable[UUID]) -> Dict[UUID, Dish]:
        ids = sorted(set(dish_ids))
        result = await self.db.execute(
            select(Dish)
            .where(Dish.id.in_(ids))
            .order_by(Dish.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {dish.id: dish for dish in result.scalars().all()}

    async def _price_lines(
        self,
        items: List[OrderItemCreate],
        dishes: Dict[UUID, Dish],
    ) -> List[PricedLine]:
        requested: Dict[UUID, int] = defaultdict(int)
        lines = []

        for position, item in enumerate(items):
            dish = dishes.get(item.dish_id)
            if dish is None:
                raise DishNotFound(f"Dish with id {item.dish_id} not found", dish_id=str(item.dish_id))

            if dish.status != DishStatus.AVAILABLE:
                raise DishUnavailable(
                    f'Dish "{dish.name}" is not available',
                    dish_id=str(dish.id),
                    status=dish.status.value,
                )

            # Several lines may draw on the same dish
            requested[dish.id] += item.quantity
            if dish.is_stock_tracked and dish.stock_quantity < requested[dish.id]:
                raise InsufficientStock(
                    f'Insufficient stock for dish "{dish.name}". '
                    f"Available: {dish.stock_quantity}, requested: {requested[dish.id]}",
                    dish_id=str(dish.id),
                    available=dish.stock_quantity,
                    requested=requested[dish.id],
                )

            variant = None
            if item.variant_id is not None:
                variant = await self._get_variant(dish, item.variant_id)

            price = unit_price(dish, variant)
            if item.unit_price is not None and to_money(item.unit_price) != to_money(price):
                logger.info(
                    "Ignoring client unit price",
                    dish_id=str(dish.id),
                    client_price=str(item.unit_price),
                    price=str(to_money(price)),
                )

            lines.append(
                PricedLine(
                    position=position,
                    dish=dish,
                    variant=variant,
                    quantity=item.quantity,
                    unit_price=price,
                    special_requests=item.special_requests,
                )
            )

        return lines

    async def _get_variant(self, dish: Dish, variant_id: UUID) -> DishVariant:
        result = await self.db.execute(
            select(DishVariant).where(
                DishVariant.id == variant_id,
                DishVariant.dish_id == dish.id,
            )
        )
        variant = result.scalar_one_or_none()
        if variant is None:
            raise VariantNotFound(
                f'Variant {variant_id} not found for dish "{dish.name}"',
                dish_id=str(dish.id),
                variant_id=str(variant_id),
            )
        return variant

    async def _apply_promo_code(
        self,
        code: Optional[str],
        subtotal: Decimal,
        now: datetime,
    ) -> Tuple[Optional[PromoCode], Decimal]:
        if not code:
            return None, ZERO

        result = await self.db.execute(
            select(PromoCode)
            .where(PromoCode.code == code)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        promo = result.scalar_one_or_none()
        if promo is None:
            raise PromoCodeInvalid("Invalid promo code", code=code)

        check_promo_code(promo, subtotal, now)
        return promo, compute_discount(promo, subtotal)

    async def _lock_time_slot(self, pickup_slot: datetime) -> TimeSlot:
        result = await self.db.execute(
            select(TimeSlot)
            .where(
                TimeSlot.date == pickup_slot.date(),
                TimeSlot.start_time <= pickup_slot.time(),
                TimeSlot.end_time > pickup_slot.time(),
                TimeSlot.is_available.is_(True),
            )
            .order_by(TimeSlot.start_time)
            .limit(1)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        slot = result.scalar_one_or_none()
        if slot is None:
            raise NoAvailableSlot(
                "No available time slot for the requested pickup time",
                pickup_slot=pickup_slot.isoformat(),
            )
        if slot.is_full:
            raise SlotFullyBooked(
                "The requested time slot is fully booked",
                time_slot_id=str(slot.id),
            )
        return slot

    async def _create_owner(self, data: OrderCreate, user: Optional[User]) -> OrderOwner:
        if user is not None:
            return RegisteredOwner(user_id=user.id)

        customer = Customer(**data.customer_info.model_dump())
        self.db.add(customer)
        await self.db.flush()
        return GuestOwner(customer_id=customer.id)

    def _build_order(
        self,
        data: OrderCreate,
        owner: OrderOwner,
        pickup_slot: datetime,
        slot: TimeSlot,
        lines: List[PricedLine],
        totals: OrderTotals,
    ) -> Order:
        order_number = generate_order_number()
        order = Order(
            order_number=order_number,
            qr_code=qr_code_for(order_number),
            status=OrderStatus.NEW,
            pickup_slot=pickup_slot,
            time_slot_id=slot.id,
            total_amount=to_money(totals.total_amount),
            tax_amount=to_money(totals.tax_amount),
            special_notes=data.special_notes,
        )
        order.assign_owner(owner)
        order.items = [
            OrderItem(
                dish_id=line.dish.id,
                variant_id=line.variant.id if line.variant is not None else None,
                position=line.position,
                quantity=line.quantity,
                unit_price=to_money(line.unit_price),
                total_price=to_money(line.total_price),
                special_requests=line.special_requests,
            )
            for line in lines
        ]
        return order
