"""Dish catalog API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.menu import DishStatus
from app.models.user import User, UserRole
from app.schemas.menu import (
    DishCreate,
    DishResponse,
    DishStockUpdate,
    DishVariantCreate,
    DishVariantResponse,
)
from app.services import catalog
from app.api.auth import require_role

router = APIRouter()


@router.get("", response_model=List[DishResponse])
async def list_dishes(
    status: Optional[DishStatus] = None,
    tag: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List dishes, optionally filtered by status or tag"""
    return await catalog.list_dishes(db, status=status, tag=tag)


@router.get("/{dish_id}", response_model=DishResponse)
async def get_dish(
    dish_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a dish with its variants"""
    return await catalog.get_dish(db, dish_id)


@router.post("", response_model=DishResponse, status_code=201)
async def create_dish(
    dish_data: DishCreate,
    current_user: User = Depends(require_role(UserRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new dish"""
    return await catalog.create_dish(db, dish_data)


@router.post("/{dish_id}/variants", response_model=DishVariantResponse, status_code=201)
async def create_dish_variant(
    dish_id: UUID,
    variant_data: DishVariantCreate,
    current_user: User = Depends(require_role(UserRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Add a size or supplement to a dish"""
    return await catalog.create_dish_variant(db, dish_id, variant_data)


@router.patch("/{dish_id}/stock", response_model=DishResponse)
async def update_dish_stock(
    dish_id: UUID,
    stock_data: DishStockUpdate,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """Set a dish's stock level"""
    return await catalog.update_dish_stock(db, dish_id, stock_data)
