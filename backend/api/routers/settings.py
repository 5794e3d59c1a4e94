"""
Settings API router.
"""
from fastapi import APIRouter

from backend.core.db import get_all_settings, get_adjustment_window, set_adjustment_window
from backend.api.models import AdjustmentWindowRequest

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("")
def get_settings():
    """All stored settings plus the effective adjustment window."""
    stored = get_all_settings()
    stored.pop("claimedAdjustments", None)
    return {
        "settings": stored,
        "adjustment_window_days": get_adjustment_window(),
    }


@router.put("/adjustment-window")
def update_adjustment_window(request: AdjustmentWindowRequest):
    """Change the adjustment window used for every future matching run."""
    days = set_adjustment_window(request.days)
    return {"success": True, "adjustment_window_days": days}
