"""Dish catalog management"""

from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import is_concurrency_failure
from app.errors import ConcurrencyConflict, DishNotFound
from app.models.menu import Dish, DishStatus, DishVariant
from app.schemas.menu import DishCreate, DishStockUpdate, DishVariantCreate

logger = structlog.get_logger()


async def get_dish(db: AsyncSession, dish_id: UUID) -> Dish:
    result = await db.execute(
        select(Dish)
        .where(Dish.id == dish_id)
        .options(selectinload(Dish.variants))
        .execution_options(populate_existing=True)
    )
    dish = result.scalar_one_or_none()
    if dish is None:
        raise DishNotFound(f"Dish with id {dish_id} not found", dish_id=str(dish_id))
    return dish


async def list_dishes(
    db: AsyncSession,
    status: Optional[DishStatus] = None,
    tag: Optional[str] = None,
) -> List[Dish]:
    query = select(Dish).options(selectinload(Dish.variants)).order_by(Dish.name)
    if status:
        query = query.where(Dish.status == status)
    result = await db.execute(query)
    dishes = list(result.scalars().all())

    # Tags are a JSON list; filter in Python to stay backend neutral
    if tag:
        dishes = [dish for dish in dishes if tag in (dish.tags or [])]
    return dishes


async def create_dish(db: AsyncSession, dish_data: DishCreate) -> Dish:
    dish = Dish(**dish_data.model_dump())
    if dish.stock_quantity == 0 and dish.status == DishStatus.AVAILABLE:
        dish.status = DishStatus.OUT_OF_STOCK

    db.add(dish)
    await db.commit()

    logger.info("Dish created", dish_id=str(dish.id), name=dish.name)
    return await get_dish(db, dish.id)


async def create_dish_variant(
    db: AsyncSession,
    dish_id: UUID,
    variant_data: DishVariantCreate,
) -> DishVariant:
    """Add a variant; a new default replaces the dish's previous default"""
    try:
        # Serializes default changes for the dish
        result = await db.execute(select(Dish.id).where(Dish.id == dish_id).with_for_update())
        if result.scalar_one_or_none() is None:
            raise DishNotFound(f"Dish with id {dish_id} not found", dish_id=str(dish_id))

        if variant_data.is_default:
            await db.execute(
                update(DishVariant)
                .where(DishVariant.dish_id == dish_id, DishVariant.is_default.is_(True))
                .values(is_default=False)
                .execution_options(synchronize_session="fetch")
            )

        variant = DishVariant(dish_id=dish_id, **variant_data.model_dump())
        db.add(variant)
        await db.commit()
    except Exception as e:
        await db.rollback()
        if not is_concurrency_failure(e):
            raise
        logger.warning("Dish variant creation conflicted with a concurrent change", dish_id=str(dish_id))
        raise ConcurrencyConflict(
            "The variant could not be created because of a concurrent change, please retry"
        ) from e

    await db.refresh(variant)

    logger.info(
        "Dish variant created",
        dish_id=str(dish_id),
        variant_id=str(variant.id),
        is_default=variant.is_default,
    )
    return variant


async def update_dish_stock(db: AsyncSession, dish_id: UUID, stock_data: DishStockUpdate) -> Dish:
    """Set the stock level.

    An explicit status wins. Otherwise zero stock marks the dish out of
    stock and a positive (or untracked) level revives an out-of-stock dish.
    """
    result = await db.execute(
        select(Dish)
        .where(Dish.id == dish_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    dish = result.scalar_one_or_none()
    if dish is None:
        raise DishNotFound(f"Dish with id {dish_id} not found", dish_id=str(dish_id))

    dish.stock_quantity = stock_data.stock_quantity

    if stock_data.status is not None:
        dish.status = stock_data.status
    elif dish.stock_quantity == 0:
        dish.status = DishStatus.OUT_OF_STOCK
    elif dish.status == DishStatus.OUT_OF_STOCK:
        dish.status = DishStatus.AVAILABLE

    await db.commit()

    logger.info(
        "Dish stock updated",
        dish_id=str(dish.id),
        stock_quantity=dish.stock_quantity,
        status=dish.status.value,
    )
    return await get_dish(db, dish.id)
