"""
Claimed adjustment database operations.

Claims are keyed by the storage form of ClaimKey
("{receipt id}_{item code}_{coupon id}").
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any

from tracker.price_adjust.claims import ClaimStore
from tracker.price_adjust.models import ClaimKey, ClaimRecord

from .base import get_db


def mark_adjustment_claimed(
    key: ClaimKey,
    amount: Decimal,
    claimed_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Record a claim, replacing any earlier claim for the same key."""
    storage_key = key.to_storage_key()
    claimed_at = claimed_at or datetime.utcnow()

    with get_db() as conn:
        conn.execute("""
            INSERT OR REPLACE INTO claimed_adjustments
                (storage_key, purchase_record_id, item_code, promotion_record_id, amount, claimed_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            storage_key,
            key.purchase_record_id,
            key.item_code,
            key.promotion_record_id,
            float(amount),
            claimed_at.isoformat(),
        ))

    return get_claim(storage_key)


def unmark_adjustment_claimed(storage_key: str) -> bool:
    """Remove a claim. Returns True if it existed."""
    with get_db() as conn:
        result = conn.execute(
            "DELETE FROM claimed_adjustments WHERE storage_key = ?", (storage_key,)
        )
        return result.rowcount > 0


def get_claim(storage_key: str) -> Optional[Dict[str, Any]]:
    """Get a claim row by storage key."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM claimed_adjustments WHERE storage_key = ?", (storage_key,)
        ).fetchone()
        if row:
            return dict(row)
    return None


def list_claims() -> List[Dict[str, Any]]:
    """All claims, most recent first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM claimed_adjustments ORDER BY claimed_at DESC"
        ).fetchall()
        return [dict(row) for row in rows]


def _to_key(row: Dict[str, Any]) -> ClaimKey:
    return ClaimKey(row["purchase_record_id"], row["item_code"], row["promotion_record_id"])


def _to_record(row: Dict[str, Any]) -> ClaimRecord:
    return ClaimRecord(
        claimed_at=datetime.fromisoformat(row["claimed_at"]),
        amount=Decimal(str(row["amount"])),
    )


class SqliteClaimStore(ClaimStore):
    """ClaimStore backed by the claimed_adjustments table."""

    def mark_claimed(
        self, key: ClaimKey, amount: Decimal, claimed_at: Optional[datetime] = None
    ) -> ClaimRecord:
        return _to_record(mark_adjustment_claimed(key, amount, claimed_at))

    def unmark_claimed(self, key: ClaimKey) -> bool:
        return unmark_adjustment_claimed(key.to_storage_key())

    def get_claim(self, key: ClaimKey) -> Optional[ClaimRecord]:
        row = get_claim(key.to_storage_key())
        return _to_record(row) if row else None

    def all_claims(self) -> dict[ClaimKey, ClaimRecord]:
        return {_to_key(row): _to_record(row) for row in list_claims()}
