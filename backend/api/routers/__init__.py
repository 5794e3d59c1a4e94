"""
API Routers package.

Each module contains a FastAPI router for a specific domain.
"""

from .receipts import router as receipts_router
from .coupons import router as coupons_router
from .settings import router as settings_router
from .adjustments import router as adjustments_router
from .backup import router as backup_router

__all__ = [
    "receipts_router",
    "coupons_router",
    "settings_router",
    "adjustments_router",
    "backup_router",
]
