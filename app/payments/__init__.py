"""Payment gateway implementations"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.payments.base import BasePaymentGateway
from app.payments.simulated import SimulatedPaymentGateway

GATEWAYS = {
    "simulated": SimulatedPaymentGateway,
}


def get_payment_gateway(db: AsyncSession, name: Optional[str] = None) -> BasePaymentGateway:
    """Factory function to create the configured payment gateway"""
    gateway_name = name or settings.payment_gateway
    gateway_class = GATEWAYS.get(gateway_name)
    if not gateway_class:
        raise ValueError(f"Unknown payment gateway: {gateway_name}")
    return gateway_class(db)


__all__ = [
    "BasePaymentGateway",
    "SimulatedPaymentGateway",
    "get_payment_gateway",
]
