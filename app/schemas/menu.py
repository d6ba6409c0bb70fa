"""Dish and variant schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.menu import DishStatus


class DishVariantCreate(BaseModel):
    """Create dish variant request"""
    name: str
    price_modifier: Decimal = Decimal("0")
    is_default: bool = False


class DishVariantResponse(BaseModel):
    """Dish variant response"""
    id: UUID
    dish_id: UUID
    name: str
    price_modifier: Decimal
    is_default: bool
    created_at: datetime

    class Config:
        from_attributes = True


class DishCreate(BaseModel):
    """Create dish request"""
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    ingredients: Optional[str] = None
    allergens: List[str] = []
    tags: List[str] = []
    photo_url: Optional[str] = None
    status: DishStatus = DishStatus.AVAILABLE
    preparation_time_minutes: int = Field(20, gt=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    stock_threshold: Optional[int] = Field(None, ge=0)


class DishStockUpdate(BaseModel):
    """Stock level update; an explicit status overrides the automatic one"""
    stock_quantity: Optional[int] = Field(..., ge=0)
    status: Optional[DishStatus] = None


class DishResponse(BaseModel):
    """Dish response"""
    id: UUID
    name: str
    description: Optional[str]
    price: Decimal
    ingredients: Optional[str]
    allergens: List[str]
    tags: List[str]
    photo_url: Optional[str]
    status: DishStatus
    preparation_time_minutes: int
    stock_quantity: Optional[int]
    stock_threshold: Optional[int]
    variants: List[DishVariantResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
