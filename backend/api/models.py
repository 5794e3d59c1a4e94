"""
Pydantic request models for the API.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


# ============== Receipts ==============

class ReceiptItemRequest(BaseModel):
    item_number: str = Field(..., min_length=1)
    final_price: Decimal = Field(..., ge=0)
    description: Optional[str] = None


class ReceiptRequest(BaseModel):
    id: Optional[str] = None  # If not provided, auto-generate
    purchase_date: date
    total: Optional[Decimal] = Field(default=None, ge=0)
    items: List[ReceiptItemRequest] = Field(default_factory=list)


# ============== Coupons ==============

class CouponItemRequest(BaseModel):
    """A coupon line: a sale price, a discount, or both."""
    item_number: str = Field(..., min_length=1)
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
    discount: Optional[Decimal] = Field(default=None, ge=0)
    description: Optional[str] = None


class CouponRequest(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    valid_from: date
    valid_until: date
    items: List[CouponItemRequest] = Field(default_factory=list)


# ============== Settings ==============

class AdjustmentWindowRequest(BaseModel):
    days: int = Field(..., ge=0, le=365)


# ============== Claims ==============

class ClaimRequest(BaseModel):
    purchase_record_id: str = Field(..., min_length=1)
    item_code: str = Field(..., min_length=1)
    promotion_record_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
