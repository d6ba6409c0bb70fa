"""Promo code management and previews"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import InvalidPromoDefinition, PromoCodeExists, PromoCodeInvalid
from app.models.promo import PromoCode
from app.schemas.promo import PromoCodeCreate, PromoCodeResponse, PromoCodeValidation
from app.services.pricing import check_promo_code, compute_discount, to_money

logger = structlog.get_logger()


async def create_promo_code(db: AsyncSession, promo_data: PromoCodeCreate) -> PromoCode:
    if (promo_data.discount_percentage is None) == (promo_data.discount_amount is None):
        raise InvalidPromoDefinition(
            "Exactly one of discount_percentage or discount_amount must be set",
            code=promo_data.code,
        )
    if promo_data.valid_from >= promo_data.valid_until:
        raise InvalidPromoDefinition(
            "valid_from must be before valid_until",
            code=promo_data.code,
        )

    result = await db.execute(select(PromoCode.id).where(PromoCode.code == promo_data.code))
    if result.scalar_one_or_none() is not None:
        raise PromoCodeExists(f"Promo code {promo_data.code} already exists", code=promo_data.code)

    promo = PromoCode(**promo_data.model_dump())
    db.add(promo)
    await db.commit()
    await db.refresh(promo)

    logger.info("Promo code created", promo_code_id=str(promo.id), code=promo.code)
    return promo


async def validate_promo_code(
    db: AsyncSession,
    code: str,
    order_amount: Decimal,
    now: Optional[datetime] = None,
) -> PromoCodeValidation:
    """Preview the discount ``code`` would give; nothing is reserved or written"""
    result = await db.execute(select(PromoCode).where(PromoCode.code == code))
    promo = result.scalar_one_or_none()

    try:
        if promo is None:
            raise PromoCodeInvalid("Invalid promo code", code=code)
        check_promo_code(promo, order_amount, now or datetime.utcnow())
    except PromoCodeInvalid as e:
        return PromoCodeValidation(valid=False, error=e.message)

    return PromoCodeValidation(
        valid=True,
        discount=to_money(compute_discount(promo, order_amount)),
        promo_code=PromoCodeResponse.model_validate(promo),
    )
