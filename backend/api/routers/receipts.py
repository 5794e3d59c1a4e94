"""
Receipts API router.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from tracker.price_adjust.models import PurchaseLineItem, PurchaseRecord

from backend.core.db import (
    new_receipt_id, save_receipt, get_receipt, list_receipts, delete_receipt
)
from backend.api.models import ReceiptRequest

router = APIRouter(prefix="/api/receipts", tags=["Receipts"])


@router.get("")
def get_receipts(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000)
):
    """List receipts, newest purchase first."""
    receipts = list_receipts(start_date=start_date, end_date=end_date, limit=limit)
    return {"receipts": receipts, "count": len(receipts)}


@router.post("")
def create_receipt(request: ReceiptRequest):
    """Save a receipt (replaces any receipt with the same id)."""
    record = PurchaseRecord(
        id=request.id or new_receipt_id(),
        purchase_date=request.purchase_date,
        items=[
            PurchaseLineItem(
                item_code=item.item_number.strip(),
                final_price=item.final_price,
                description=item.description,
            )
            for item in request.items
        ],
        total=request.total,
    )
    return {"success": True, "receipt": save_receipt(record)}


@router.get("/{receipt_id}")
def get_receipt_detail(receipt_id: str):
    """Get a receipt by ID."""
    receipt = get_receipt(receipt_id)
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


@router.delete("/{receipt_id}")
def remove_receipt(receipt_id: str):
    """Delete a receipt."""
    if not delete_receipt(receipt_id):
        raise HTTPException(status_code=404, detail="Receipt not found")
    return {"success": True, "message": f"Deleted receipt {receipt_id}"}
