"""Authentication schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str  # User ID
    role: str
    exp: datetime


class RefreshRequest(BaseModel):
    """Token refresh request"""
    refresh_token: str


class UserCreate(BaseModel):
    """Create user request"""
    email: EmailStr
    phone: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.EMPLOYEE
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(BaseModel):
    """User response"""
    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: str
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True
