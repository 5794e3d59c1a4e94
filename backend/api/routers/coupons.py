"""
Coupons API router.
"""
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from tracker.price_adjust.adapters import JsonRecordSource, monthly_coupon_files
from tracker.price_adjust.models import PromotionLineItem, PromotionRecord

from backend.core.config import settings
from backend.core.db import (
    new_coupon_id, save_coupon, get_coupon, list_coupons, delete_coupon
)
from backend.core.db.base import ROOT_DIR
from backend.api.models import CouponRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coupons", tags=["Coupons"])


def _coupon_dir() -> Path:
    path = Path(settings.COUPON_DIR)
    return path if path.is_absolute() else ROOT_DIR / path


@router.get("")
def get_coupons(
    active_only: bool = Query(False),
    today: Optional[date] = Query(None)
):
    """List coupons; active_only drops the ones that have expired."""
    coupons = list_coupons(active_only=active_only, today=today)
    return {"coupons": coupons, "count": len(coupons)}


@router.post("")
def create_coupon(request: CouponRequest):
    """Save a coupon (replaces any coupon with the same id)."""
    if request.valid_until < request.valid_from:
        raise HTTPException(status_code=422, detail="valid_until is before valid_from")

    record = PromotionRecord(
        id=request.id or new_coupon_id(),
        valid_from=request.valid_from,
        valid_until=request.valid_until,
        title=request.title,
        items=[
            PromotionLineItem(
                item_code=item.item_number.strip(),
                sale_price=item.sale_price,
                discount_amount=item.discount,
                description=item.description,
            )
            for item in request.items
        ],
    )
    return {"success": True, "coupon": save_coupon(record)}


@router.post("/import-monthly")
def import_monthly_coupons(today: Optional[date] = Query(None)):
    """Load this month's and next month's coupon files from the coupon directory."""
    coupon_dir = _coupon_dir()
    if not coupon_dir.is_dir():
        raise HTTPException(status_code=503, detail=f"Coupon directory not found: {settings.COUPON_DIR}")

    files = monthly_coupon_files(coupon_dir, today)
    try:
        promotions = JsonRecordSource(files).list_promotions()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for promotion in promotions:
        save_coupon(promotion)

    logger.info(f"Imported {len(promotions)} coupons from {len(files)} monthly files")
    return {
        "success": True,
        "files": [f.name for f in files],
        "imported_count": len(promotions),
    }


@router.get("/{coupon_id}")
def get_coupon_detail(coupon_id: str):
    """Get a coupon by ID."""
    coupon = get_coupon(coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@router.delete("/{coupon_id}")
def remove_coupon(coupon_id: str):
    """Delete a coupon."""
    if not delete_coupon(coupon_id):
        raise HTTPException(status_code=404, detail="Coupon not found")
    return {"success": True, "message": f"Deleted coupon {coupon_id}"}
