"""Promo code API endpoints"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.promo import PromoCode
from app.models.user import User, UserRole
from app.schemas.promo import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeValidateRequest,
    PromoCodeValidation,
)
from app.services import promotions
from app.api.auth import require_role

router = APIRouter()


@router.get("", response_model=List[PromoCodeResponse])
async def list_promo_codes(
    current_user: User = Depends(require_role(UserRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """List promo codes"""
    result = await db.execute(select(PromoCode).order_by(PromoCode.created_at.desc()))
    return result.scalars().all()


@router.post("", response_model=PromoCodeResponse, status_code=201)
async def create_promo_code(
    promo_data: PromoCodeCreate,
    current_user: User = Depends(require_role(UserRole.MANAGER)),
    db: AsyncSession = Depends(get_db),
):
    """Create a promo code"""
    return await promotions.create_promo_code(db, promo_data)


@router.post("/validate", response_model=PromoCodeValidation)
async def validate_promo_code(
    request: PromoCodeValidateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Preview the discount a code gives for an order amount"""
    return await promotions.validate_promo_code(db, request.code, request.order_amount)
