"""FastAPI routers package."""

from .auth import router as auth_router
from .bookings import router as bookings_router
from .metrics import router as metrics_router
from .packages import router as packages_router
from .travelers import router as travelers_router

__all__ = [
    "auth_router",
    "bookings_router",
    "metrics_router",
    "packages_router",
    "travelers_router",
]
