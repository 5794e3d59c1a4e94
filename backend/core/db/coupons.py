"""
Coupon (promotion) database operations.
"""
import json
import logging
import uuid
from datetime import date, datetime
from typing import Optional, List, Dict, Any

from tracker.price_adjust.adapters import parse_promotion_record, promotion_to_dict
from tracker.price_adjust.models import PromotionRecord

from .base import get_db

logger = logging.getLogger(__name__)


def new_coupon_id() -> str:
    return f"coupon_{int(datetime.utcnow().timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


def save_coupon(record: PromotionRecord, upload_date: Optional[datetime] = None) -> Dict[str, Any]:
    """Insert or replace a coupon. Returns the stored (camelCase) form."""
    data = promotion_to_dict(record)
    data["uploadDate"] = (upload_date or datetime.utcnow()).isoformat()

    with get_db() as conn:
        conn.execute("""
            INSERT OR REPLACE INTO coupons (id, valid_from, valid_until, title, item_count, data, upload_date)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            record.id,
            data["validFrom"],
            data["validUntil"],
            record.title,
            len(record.items),
            json.dumps(data),
            data["uploadDate"],
        ))

    logger.info(f"Saved coupon {record.id} ({len(record.items)} items)")
    return data


def get_coupon(coupon_id: str) -> Optional[Dict[str, Any]]:
    """Get a coupon by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT data FROM coupons WHERE id = ?", (coupon_id,)
        ).fetchone()
        if row:
            return json.loads(row["data"])
    return None


def list_coupons(active_only: bool = False, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    List coupons in upload order.

    active_only keeps coupons that have not yet expired; coupons without
    an end date count as active.
    """
    query = "SELECT data FROM coupons"
    params: list = []

    if active_only:
        query += " WHERE valid_until IS NULL OR valid_until >= ?"
        params.append((today or date.today()).isoformat())

    query += " ORDER BY created_at, rowid"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()
        return [json.loads(row["data"]) for row in rows]


def delete_coupon(coupon_id: str) -> bool:
    """Delete a coupon. Returns True if it existed."""
    with get_db() as conn:
        result = conn.execute("DELETE FROM coupons WHERE id = ?", (coupon_id,))
        return result.rowcount > 0


def load_promotion_records() -> List[PromotionRecord]:
    """Every stored coupon parsed into engine records."""
    records = []
    for data in list_coupons():
        record = parse_promotion_record(data)
        if record is None:
            logger.warning(f"Skipping unreadable stored coupon {data.get('id')}")
            continue
        records.append(record)
    return records
