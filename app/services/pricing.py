"""Pricing and promo code rules shared by placement and previews.

All arithmetic is done on unrounded ``Decimal`` values; amounts are only
rounded to cents (``to_money``) when they are persisted.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from app.errors import (
    PromoCodeInvalid,
    PromoCodeExpired,
    PromoCodeUsageLimitExceeded,
    PromoCodeMinimumNotMet,
)
from app.models.menu import Dish, DishVariant
from app.models.promo import PromoCode

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round to cents, half up"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def unit_price(dish: Dish, variant: Optional[DishVariant] = None) -> Decimal:
    """Authoritative unit price: dish price plus the variant's offset, floored at zero"""
    modifier = Decimal(variant.price_modifier) if variant is not None else ZERO
    return max(ZERO, Decimal(dish.price) + modifier)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount: Decimal
    tax_rate: Decimal

    @property
    def discounted_subtotal(self) -> Decimal:
        return self.subtotal - self.discount

    @property
    def tax_amount(self) -> Decimal:
        return self.discounted_subtotal * self.tax_rate

    @property
    def total_amount(self) -> Decimal:
        return self.discounted_subtotal + self.tax_amount


def compute_totals(subtotal: Decimal, discount: Decimal, tax_rate: Decimal) -> OrderTotals:
    if discount > subtotal:
        raise ValueError("Discount cannot exceed the subtotal")
    return OrderTotals(subtotal=subtotal, discount=discount, tax_rate=tax_rate)


def check_promo_code(promo: PromoCode, subtotal: Decimal, now: datetime) -> None:
    """Raise the matching promo error if ``promo`` cannot apply to ``subtotal``"""
    if not promo.is_active:
        raise PromoCodeInvalid("Promo code is not active", code=promo.code)

    if now < promo.valid_from:
        raise PromoCodeExpired("Promo code is not yet valid", code=promo.code)
    if now >= promo.valid_until:
        raise PromoCodeExpired("Promo code has expired", code=promo.code)

    if promo.is_exhausted:
        raise PromoCodeUsageLimitExceeded(
            "Promo code has reached its usage limit",
            code=promo.code,
            max_uses=promo.max_uses,
        )

    if promo.minimum_order_amount is not None and subtotal < Decimal(promo.minimum_order_amount):
        raise PromoCodeMinimumNotMet(
            f"Order must be at least ${Decimal(promo.minimum_order_amount):.2f} to use this promo code",
            code=promo.code,
            minimum_order_amount=str(promo.minimum_order_amount),
        )


def compute_discount(promo: PromoCode, subtotal: Decimal) -> Decimal:
    """Discount for ``subtotal``, never more than the subtotal itself"""
    if promo.discount_percentage is not None:
        discount = subtotal * Decimal(promo.discount_percentage) / HUNDRED
    elif promo.discount_amount is not None:
        discount = Decimal(promo.discount_amount)
    else:
        discount = ZERO
    return max(ZERO, min(discount, subtotal))
