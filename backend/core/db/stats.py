"""
Database statistics operations.
"""
from typing import Dict, Any

from .base import get_db


def receipt_count() -> int:
    with get_db() as conn:
        return conn.execute("SELECT COUNT(*) FROM receipts").fetchone()[0]


def coupon_count() -> int:
    with get_db() as conn:
        return conn.execute("SELECT COUNT(*) FROM coupons").fetchone()[0]


def item_count() -> int:
    """Total receipt line items across all receipts."""
    with get_db() as conn:
        return conn.execute("SELECT COALESCE(SUM(item_count), 0) FROM receipts").fetchone()[0]


def get_stats() -> Dict[str, Any]:
    """Get database statistics."""
    with get_db() as conn:
        claims = conn.execute("SELECT COUNT(*) FROM claimed_adjustments").fetchone()[0]

    return {
        "receipts": receipt_count(),
        "coupons": coupon_count(),
        "items": item_count(),
        "claims": claims,
    }
