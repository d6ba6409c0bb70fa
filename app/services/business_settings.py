"""Business settings store"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import InvalidBusinessSetting
from app.models.business_settings import BusinessSetting

logger = structlog.get_logger()

TAX_RATE_KEY = "tax_rate"
MAX_TAX_RATE = Decimal("1")


def parse_tax_rate(value: str) -> Decimal:
    """A tax rate is a finite decimal fraction between 0 and 1"""
    try:
        rate = Decimal(value)
    except InvalidOperation:
        raise InvalidBusinessSetting("Tax rate must be a decimal number", key=TAX_RATE_KEY, value=value)

    if not rate.is_finite() or rate < 0 or rate > MAX_TAX_RATE:
        raise InvalidBusinessSetting("Tax rate must be between 0 and 1", key=TAX_RATE_KEY, value=value)
    return rate


# Keys whose values other services parse
VALIDATORS = {
    TAX_RATE_KEY: parse_tax_rate,
}


async def get_business_settings(db: AsyncSession, key: Optional[str] = None) -> List[BusinessSetting]:
    query = select(BusinessSetting).order_by(BusinessSetting.key)
    if key:
        query = query.where(BusinessSetting.key == key)
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_business_setting(
    db: AsyncSession,
    key: str,
    value: str,
    description: Optional[str] = None,
) -> BusinessSetting:
    """Create or update a setting"""
    validate = VALIDATORS.get(key)
    if validate is not None:
        validate(value)

    result = await db.execute(
        select(BusinessSetting).where(BusinessSetting.key == key).with_for_update()
    )
    setting = result.scalar_one_or_none()

    if setting is None:
        setting = BusinessSetting(key=key, value=value, description=description)
        db.add(setting)
    else:
        setting.value = value
        if description is not None:
            setting.description = description

    await db.commit()
    await db.refresh(setting)

    logger.info("Business setting updated", key=key)
    return setting


async def get_tax_rate(db: AsyncSession) -> Decimal:
    """Tax rate from the settings table, falling back to configuration"""
    result = await db.execute(
        select(BusinessSetting.value).where(BusinessSetting.key == TAX_RATE_KEY)
    )
    stored = result.scalar_one_or_none()

    if stored is not None:
        try:
            return parse_tax_rate(stored)
        except InvalidBusinessSetting:
            logger.warning("Ignoring invalid tax_rate setting", value=stored)

    return Decimal(str(settings.tax_rate))
