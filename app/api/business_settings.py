"""Business settings API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.business_settings import BusinessSettingResponse, BusinessSettingUpdate
from app.services.business_settings import get_business_settings, update_business_setting
from app.api.auth import require_role

router = APIRouter()


@router.get("", response_model=List[BusinessSettingResponse])
async def list_business_settings(
    key: Optional[str] = None,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """List settings, or a single one by key"""
    return await get_business_settings(db, key)


@router.put("/{key}", response_model=BusinessSettingResponse)
async def upsert_business_setting(
    key: str,
    setting_data: BusinessSettingUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create or update a setting"""
    return await update_business_setting(db, key, setting_data.value, setting_data.description)
