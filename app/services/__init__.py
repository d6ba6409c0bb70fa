"""Business operations used by the API routers"""

from app.services.lifecycle import OrderLifecycleManager, TRANSITIONS
from app.services.placement import OrderPlacementEngine

__all__ = [
    "OrderLifecycleManager",
    "OrderPlacementEngine",
    "TRANSITIONS",
]
