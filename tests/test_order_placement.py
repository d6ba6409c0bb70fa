"""Tests for order placement"""

from datetime import datetime, time, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm.exc import StaleDataError

from app.errors import (
    ConcurrencyConflict,
    DishNotFound,
    DishUnavailable,
    InsufficientStock,
    NoAvailableSlot,
    OwnerRequired,
    PromoCodeExpired,
    PromoCodeInvalid,
    PromoCodeUsageLimitExceeded,
    SlotFullyBooked,
    UserNotFound,
    VariantNotFound,
)
from app.models.business_settings import BusinessSetting
from app.models.menu import DishStatus, DishVariant
from app.models.order import Customer, GuestOwner, Order, OrderStatus, RegisteredOwner
from app.models.payment import PaymentMethod, PaymentStatus
from app.models.promo import OrderPromoUsage
from app.models.time_slot import TimeSlot
from app.notifications.base import NotificationKind
from app.payments import SimulatedPaymentGateway
from app.services.placement import OrderPlacementEngine


async def count(db, model):
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar()


@pytest.mark.asyncio
async def test_guest_order_totals(placement_engine, make_order, test_dish, test_slot):
    """Two items at 19.99 with 8% tax"""
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "quantity": 2}])
    )

    assert order.status == OrderStatus.NEW
    assert order.tax_amount == Decimal("3.20")
    assert order.total_amount == Decimal("43.18")
    assert order.is_guest_order is True
    assert isinstance(order.owner, GuestOwner)
    assert order.user_id is None
    assert order.time_slot_id == test_slot.id

    assert len(order.items) == 1
    assert order.items[0].unit_price == Decimal("19.99")
    assert order.items[0].total_price == Decimal("39.98")


@pytest.mark.asyncio
async def test_order_number_and_qr_code(placement_engine, make_order, test_dish, test_slot):
    order = await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))

    prefix, millis, suffix = order.order_number.split("-")
    assert prefix == "ORD"
    assert millis.isdigit()
    assert len(suffix) == 9
    assert suffix.isalnum() and suffix == suffix.upper()
    assert order.qr_code == f"QR-{order.order_number}"


@pytest.mark.asyncio
async def test_order_numbers_are_unique(placement_engine, make_order, test_dish, test_slot):
    first = await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))
    second = await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))

    assert first.order_number != second.order_number
    assert first.qr_code != second.qr_code


@pytest.mark.asyncio
async def test_placement_updates_stock_and_slot(test_db, placement_engine, make_order, test_dish, test_slot):
    await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 3}]))

    await test_db.refresh(test_dish)
    await test_db.refresh(test_slot)
    assert test_dish.stock_quantity == 7
    assert test_dish.status == DishStatus.AVAILABLE
    assert test_slot.current_bookings == 1


@pytest.mark.asyncio
async def test_last_unit_marks_dish_out_of_stock(test_db, placement_engine, make_order, test_dish, test_slot):
    await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 10}]))

    await test_db.refresh(test_dish)
    assert test_dish.stock_quantity == 0
    assert test_dish.status == DishStatus.OUT_OF_STOCK


@pytest.mark.asyncio
async def test_untracked_dish_stock_is_left_alone(test_db, placement_engine, make_order, untracked_dish, test_slot):
    await placement_engine.place(make_order([{"dish_id": untracked_dish.id, "quantity": 50}]))

    await test_db.refresh(untracked_dish)
    assert untracked_dish.stock_quantity is None
    assert untracked_dish.status == DishStatus.AVAILABLE


@pytest.mark.asyncio
async def test_quantities_for_the_same_dish_are_aggregated(test_db, placement_engine, make_order, test_dish, test_slot):
    """Two lines of 6 cannot both draw on 10 units"""
    with pytest.raises(InsufficientStock):
        await placement_engine.place(
            make_order([
                {"dish_id": test_dish.id, "quantity": 6},
                {"dish_id": test_dish.id, "quantity": 6},
            ])
        )

    await test_db.refresh(test_dish)
    assert test_dish.stock_quantity == 10


@pytest.mark.asyncio
async def test_variant_price_is_applied(placement_engine, make_order, test_dish, test_variant, test_slot):
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "variant_id": test_variant.id, "quantity": 1}])
    )

    assert order.items[0].variant_id == test_variant.id
    assert order.items[0].unit_price == Decimal("23.99")


@pytest.mark.asyncio
async def test_client_unit_price_is_ignored(placement_engine, make_order, test_dish, test_slot):
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "quantity": 2, "unit_price": "0.01"}])
    )

    assert order.items[0].unit_price == Decimal("19.99")
    assert order.total_amount == Decimal("43.18")


@pytest.mark.asyncio
async def test_items_keep_request_order(placement_engine, make_order, test_dish, untracked_dish, test_slot):
    order = await placement_engine.place(
        make_order([
            {"dish_id": untracked_dish.id, "quantity": 1, "special_requests": "no croutons"},
            {"dish_id": test_dish.id, "quantity": 1},
        ])
    )

    assert [item.dish_id for item in order.items] == [untracked_dish.id, test_dish.id]
    assert order.items[0].special_requests == "no croutons"


@pytest.mark.asyncio
async def test_percentage_promo(test_db, placement_engine, make_order, test_dish, test_slot, percent_promo):
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "quantity": 2}], promo_code="SAVE20")
    )

    assert order.tax_amount == Decimal("2.56")
    assert order.total_amount == Decimal("34.54")
    assert order.promo_usage.promo_code_id == percent_promo.id
    assert order.promo_usage.discount_applied == Decimal("8.00")

    await test_db.refresh(percent_promo)
    assert percent_promo.used_count == 1


@pytest.mark.asyncio
async def test_fixed_promo_larger_than_subtotal(placement_engine, make_order, untracked_dish, test_slot, fixed_promo):
    order = await placement_engine.place(
        make_order([{"dish_id": untracked_dish.id, "quantity": 2}], promo_code="BIG150")
    )

    assert order.promo_usage.discount_applied == Decimal("18.00")
    assert order.tax_amount == Decimal("0.00")
    assert order.total_amount == Decimal("0.00")


@pytest.mark.asyncio
async def test_registered_user_order(test_db, placement_engine, make_order, test_user, test_dish, test_slot):
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "quantity": 1}], customer_info=None, user_id=test_user.id)
    )

    assert order.owner == RegisteredOwner(user_id=test_user.id)
    assert order.is_guest_order is False
    assert order.customer_id is None
    assert await count(test_db, Customer) == 0


@pytest.mark.asyncio
async def test_user_id_takes_precedence_over_customer_info(test_db, placement_engine, make_order, test_user, test_dish, test_slot):
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "quantity": 1}], user_id=test_user.id)
    )

    assert order.user_id == test_user.id
    assert await count(test_db, Customer) == 0


@pytest.mark.asyncio
async def test_each_guest_checkout_creates_a_customer(test_db, placement_engine, make_order, test_dish, test_slot):
    await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))
    await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))

    assert await count(test_db, Customer) == 2


@pytest.mark.asyncio
async def test_owner_is_required(test_db, placement_engine, make_order, test_dish, test_slot):
    with pytest.raises(OwnerRequired):
        await placement_engine.place(
            make_order([{"dish_id": test_dish.id, "quantity": 1}], customer_info=None)
        )

    assert await count(test_db, Order) == 0


@pytest.mark.asyncio
async def test_unknown_user(placement_engine, make_order, test_dish, test_slot):
    with pytest.raises(UserNotFound):
        await placement_engine.place(
            make_order([{"dish_id": test_dish.id, "quantity": 1}], customer_info=None, user_id=uuid4())
        )


@pytest.mark.asyncio
async def test_unknown_dish(placement_engine, make_order, test_slot):
    with pytest.raises(DishNotFound):
        await placement_engine.place(make_order([{"dish_id": uuid4(), "quantity": 1}]))


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [DishStatus.UNAVAILABLE, DishStatus.OUT_OF_STOCK])
async def test_dish_not_orderable(test_db, placement_engine, make_order, test_dish, test_slot, status):
    test_dish.status = status
    await test_db.commit()

    with pytest.raises(DishUnavailable):
        await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))


@pytest.mark.asyncio
async def test_variant_from_another_dish(test_db, placement_engine, make_order, test_dish, untracked_dish, test_slot):
    other_variant = DishVariant(dish_id=untracked_dish.id, name="Add chicken", price_modifier=Decimal("3.50"))
    test_db.add(other_variant)
    await test_db.commit()

    with pytest.raises(VariantNotFound):
        await placement_engine.place(
            make_order([{"dish_id": test_dish.id, "variant_id": other_variant.id, "quantity": 1}])
        )


@pytest.mark.asyncio
async def test_lines_are_validated_in_order(placement_engine, make_order, test_dish, test_slot):
    """A bad variant on the first line is reported before a missing dish on the second"""
    with pytest.raises(VariantNotFound):
        await placement_engine.place(
            make_order([
                {"dish_id": test_dish.id, "variant_id": uuid4(), "quantity": 1},
                {"dish_id": uuid4(), "quantity": 1},
            ])
        )


@pytest.mark.asyncio
async def test_unknown_promo_code(placement_engine, make_order, test_dish, test_slot):
    with pytest.raises(PromoCodeInvalid):
        await placement_engine.place(
            make_order([{"dish_id": test_dish.id, "quantity": 1}], promo_code="NOPE")
        )


@pytest.mark.asyncio
async def test_promo_checked_against_clock(test_db, make_order, notifier, test_dish, test_slot, percent_promo):
    engine = OrderPlacementEngine(
        test_db,
        notifier=notifier,
        clock=lambda: datetime.utcnow() + timedelta(days=60),
    )

    with pytest.raises(PromoCodeExpired):
        await engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}], promo_code="SAVE20"))


@pytest.mark.asyncio
async def test_exhausted_promo_is_untouched(test_db, placement_engine, make_order, test_dish, test_slot, percent_promo):
    percent_promo.used_count = percent_promo.max_uses
    await test_db.commit()

    with pytest.raises(PromoCodeUsageLimitExceeded):
        await placement_engine.place(
            make_order([{"dish_id": test_dish.id, "quantity": 1}], promo_code="SAVE20")
        )

    await test_db.refresh(percent_promo)
    await test_db.refresh(test_dish)
    assert percent_promo.used_count == 10
    assert test_dish.stock_quantity == 10


@pytest.mark.asyncio
async def test_no_slot_for_pickup_time(placement_engine, make_order, test_dish, test_slot, pickup_date):
    with pytest.raises(NoAvailableSlot):
        await placement_engine.place(
            make_order(
                [{"dish_id": test_dish.id, "quantity": 1}],
                pickup_slot=datetime.combine(pickup_date, time(15, 0)),
            )
        )


@pytest.mark.asyncio
async def test_slot_end_is_exclusive(placement_engine, make_order, test_dish, test_slot, pickup_date):
    with pytest.raises(NoAvailableSlot):
        await placement_engine.place(
            make_order(
                [{"dish_id": test_dish.id, "quantity": 1}],
                pickup_slot=datetime.combine(pickup_date, time(12, 30)),
            )
        )


@pytest.mark.asyncio
async def test_slot_start_is_inclusive(placement_engine, make_order, test_dish, test_slot, pickup_date):
    order = await placement_engine.place(
        make_order(
            [{"dish_id": test_dish.id, "quantity": 1}],
            pickup_slot=datetime.combine(pickup_date, time(12, 0)),
        )
    )

    assert order.time_slot_id == test_slot.id


@pytest.mark.asyncio
async def test_closed_slot_is_not_used(test_db, placement_engine, make_order, test_dish, test_slot):
    test_slot.is_available = False
    await test_db.commit()

    with pytest.raises(NoAvailableSlot):
        await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))


@pytest.mark.asyncio
async def test_full_slot_changes_nothing(test_db, placement_engine, make_order, test_dish, percent_promo, pickup_date, pickup_at):
    slot = TimeSlot(
        date=pickup_date,
        start_time=time(12, 0),
        end_time=time(12, 30),
        max_capacity=2,
        current_bookings=2,
    )
    test_db.add(slot)
    await test_db.commit()

    with pytest.raises(SlotFullyBooked):
        await placement_engine.place(
            make_order([{"dish_id": test_dish.id, "quantity": 1}], promo_code="SAVE20")
        )

    for row in (slot, test_dish, percent_promo):
        await test_db.refresh(row)
    assert slot.current_bookings == 2
    assert test_dish.stock_quantity == 10
    assert percent_promo.used_count == 0
    assert await count(test_db, Order) == 0
    assert await count(test_db, Customer) == 0
    assert await count(test_db, OrderPromoUsage) == 0


@pytest.mark.asyncio
async def test_timezone_offset_is_dropped(placement_engine, make_order, test_dish, test_slot, pickup_at):
    from datetime import timezone

    order = await placement_engine.place(
        make_order(
            [{"dish_id": test_dish.id, "quantity": 1}],
            pickup_slot=pickup_at.replace(tzinfo=timezone(timedelta(hours=2))),
        )
    )

    assert order.pickup_slot == pickup_at


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,expected",
    [(PaymentMethod.ONLINE, PaymentStatus.AUTHORIZED), (PaymentMethod.ON_SITE, PaymentStatus.PENDING)],
)
async def test_payment_opened_with_order(placement_engine, make_order, test_dish, test_slot, method, expected):
    order = await placement_engine.place(
        make_order([{"dish_id": test_dish.id, "quantity": 2}], payment_method=method)
    )

    assert len(order.payments) == 1
    payment = order.payments[0]
    assert payment.status == expected
    assert payment.amount == order.total_amount
    assert payment.tax_amount == order.tax_amount


@pytest.mark.asyncio
async def test_confirmation_sent_after_placement(placement_engine, notifier, make_order, test_dish, test_slot):
    order = await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 1}]))

    assert notifier.sent == [(order.order_number, NotificationKind.CONFIRMATION, None)]


@pytest.mark.asyncio
async def test_no_notification_on_failure(placement_engine, notifier, make_order, test_slot):
    with pytest.raises(DishNotFound):
        await placement_engine.place(make_order([{"dish_id": uuid4(), "quantity": 1}]))

    assert notifier.sent == []


class ConflictingGateway(SimulatedPaymentGateway):
    """Fails the way a lost optimistic-lock race does"""

    async def authorize(self, order_id, amount, tax_amount, method):
        raise StaleDataError("version mismatch")


@pytest.mark.asyncio
async def test_concurrent_change_rolls_back_everything(test_db, notifier, make_order, test_dish, test_slot):
    engine = OrderPlacementEngine(test_db, gateway=ConflictingGateway(test_db), notifier=notifier)

    with pytest.raises(ConcurrencyConflict):
        await engine.place(
            make_order([{"dish_id": test_dish.id, "quantity": 4}], payment_method=PaymentMethod.ONLINE)
        )

    await test_db.refresh(test_dish)
    await test_db.refresh(test_slot)
    assert test_dish.stock_quantity == 10
    assert test_slot.current_bookings == 0
    assert await count(test_db, Order) == 0
    assert await count(test_db, Customer) == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_unknown_dish_on_first_line_reported_before_later_variant(placement_engine, make_order, test_dish, test_slot):
    with pytest.raises(DishNotFound):
        await placement_engine.place(
            make_order([
                {"dish_id": uuid4(), "quantity": 1},
                {"dish_id": test_dish.id, "variant_id": uuid4(), "quantity": 1},
            ])
        )


@pytest.mark.asyncio
async def test_invalid_stored_tax_rate_falls_back_to_config(test_db, placement_engine, make_order, test_dish, test_slot):
    test_db.add(BusinessSetting(key="tax_rate", value="-2"))
    await test_db.commit()

    order = await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 2}]))

    assert order.tax_amount == Decimal("3.20")
    assert order.total_amount == Decimal("43.18")
