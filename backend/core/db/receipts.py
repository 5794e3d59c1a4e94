"""
Receipt database operations.
"""
import json
import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, List, Dict, Any

from tracker.price_adjust.adapters import parse_purchase_record, purchase_to_dict
from tracker.price_adjust.models import PurchaseRecord

from .base import get_db

logger = logging.getLogger(__name__)


def new_receipt_id() -> str:
    return f"receipt_{int(datetime.utcnow().timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


def save_receipt(record: PurchaseRecord) -> Dict[str, Any]:
    """Insert or replace a receipt. Returns the stored (camelCase) form."""
    if record.upload_date is None:
        record = replace(record, upload_date=datetime.utcnow())

    data = purchase_to_dict(record)

    with get_db() as conn:
        conn.execute("""
            INSERT OR REPLACE INTO receipts (id, purchase_date, upload_date, total, item_count, data)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            record.id,
            record.purchase_date.isoformat(),
            data.get("uploadDate"),
            data.get("total"),
            len(record.items),
            json.dumps(data),
        ))

    logger.info(f"Saved receipt {record.id} ({len(record.items)} items)")
    return data


def get_receipt(receipt_id: str) -> Optional[Dict[str, Any]]:
    """Get a receipt by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT data FROM receipts WHERE id = ?", (receipt_id,)
        ).fetchone()
        if row:
            return json.loads(row["data"])
    return None


def list_receipts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """List receipts, newest purchase first, optionally within a purchase-date range."""
    query = "SELECT data FROM receipts WHERE 1=1"
    params: list = []

    if start_date:
        query += " AND purchase_date >= ?"
        params.append(start_date.isoformat())
    if end_date:
        query += " AND purchase_date <= ?"
        params.append(end_date.isoformat())

    query += " ORDER BY purchase_date DESC, id"
    if limit:
        query += " LIMIT ?"
        params.append(limit)

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()
        return [json.loads(row["data"]) for row in rows]


def delete_receipt(receipt_id: str) -> bool:
    """Delete a receipt. Returns True if it existed."""
    with get_db() as conn:
        result = conn.execute("DELETE FROM receipts WHERE id = ?", (receipt_id,))
        return result.rowcount > 0


def load_purchase_records() -> List[PurchaseRecord]:
    """Every stored receipt parsed into engine records. Unusable rows are skipped."""
    records = []
    for data in list_receipts():
        record = parse_purchase_record(data)
        if record is None:
            logger.warning(f"Skipping unreadable stored receipt {data.get('id')}")
            continue
        records.append(record)
    return records
