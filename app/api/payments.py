"""Payment API endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.payments import get_payment_gateway
from app.schemas.payment import PaymentResponse
from app.services.payments import capture_payment
from app.api.auth import require_role

router = APIRouter()


@router.post("/{payment_id}/capture", response_model=PaymentResponse)
async def capture(
    payment_id: UUID,
    current_user: User = Depends(require_role(UserRole.EMPLOYEE)),
    db: AsyncSession = Depends(get_db),
):
    """Settle a pending or authorized payment"""
    return await capture_payment(db, get_payment_gateway(db), payment_id)
