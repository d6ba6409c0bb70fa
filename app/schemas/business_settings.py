"""Business settings schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class BusinessSettingUpdate(BaseModel):
    """Upsert a setting value"""
    value: str
    description: Optional[str] = None


class BusinessSettingResponse(BaseModel):
    """Business setting response"""
    id: UUID
    key: str
    value: str
    description: Optional[str]
    updated_at: datetime

    class Config:
        from_attributes = True
