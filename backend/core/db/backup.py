"""
Backup export/import and full data reset.

The backup document keeps the browser app's shape:
    {"version", "exportDate", "receipts": [...], "coupons": [...], "settings": {...}}
Claims travel inside settings["claimedAdjustments"], keyed by storage key.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Dict, Any

from tracker.price_adjust.adapters import (
    parse_money,
    parse_promotion_records,
    parse_purchase_records,
    parse_timestamp,
)
from tracker.price_adjust.config import validate_window_days
from tracker.price_adjust.models import ClaimKey, PurchaseRecord

from .base import get_db
from .claims import list_claims, mark_adjustment_claimed
from .coupons import list_coupons, save_coupon
from .receipts import list_receipts, save_receipt
from .settings import ADJUSTMENT_WINDOW_KEY, get_all_settings, set_setting

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
CLAIMS_SETTING_KEY = "claimedAdjustments"


def export_all_data() -> Dict[str, Any]:
    """Everything in the database as one backup document."""
    settings = get_all_settings()
    settings[CLAIMS_SETTING_KEY] = {
        claim["storage_key"]: {
            "claimedDate": claim["claimed_at"],
            "amount": claim["amount"],
            "receiptId": claim["purchase_record_id"],
            "itemNumber": claim["item_code"],
            "couponId": claim["promotion_record_id"],
        }
        for claim in list_claims()
    }

    return {
        "version": BACKUP_VERSION,
        "exportDate": datetime.utcnow().isoformat(),
        "receipts": list_receipts(),
        "coupons": list_coupons(),
        "settings": settings,
    }


def _import_claims(claims: Any, receipts: List[PurchaseRecord]) -> int:
    if not isinstance(claims, dict):
        return 0

    imported = 0
    for storage_key, info in claims.items():
        if not isinstance(info, dict):
            continue

        if info.get("receiptId") and info.get("itemNumber") and info.get("couponId"):
            key = ClaimKey(str(info["receiptId"]), str(info["itemNumber"]), str(info["couponId"]))
        else:
            key = ClaimKey.from_storage_key(storage_key, receipts)
        if key is None:
            logger.warning(f"Skipping claim with unresolvable key: {storage_key}")
            continue

        amount = parse_money(info.get("amount")) or Decimal("0")
        claimed_at = parse_timestamp(info.get("claimedDate")) or datetime.utcnow()
        mark_adjustment_claimed(key, amount, claimed_at)
        imported += 1
    return imported


def import_data(data: Dict[str, Any]) -> Dict[str, int]:
    """
    Merge a backup document into the database.

    Records with the same id are replaced. Unusable records are skipped.

    Raises:
        ValueError: if the document is not a JSON object, or its stored
            adjustment window is not a non-negative whole number of days
    """
    if not isinstance(data, dict):
        raise ValueError("Backup must be a JSON object")

    settings = data.get("settings")
    settings = dict(settings) if isinstance(settings, dict) else {}
    if ADJUSTMENT_WINDOW_KEY in settings:
        settings[ADJUSTMENT_WINDOW_KEY] = validate_window_days(settings[ADJUSTMENT_WINDOW_KEY])

    receipts = parse_purchase_records(data.get("receipts"))
    coupons = parse_promotion_records(data.get("coupons"))

    for receipt in receipts:
        save_receipt(receipt)
    for coupon in coupons:
        save_coupon(coupon)

    claims = _import_claims(settings.pop(CLAIMS_SETTING_KEY, None), receipts)
    for key, value in settings.items():
        set_setting(key, value)

    counts = {
        "receipts": len(receipts),
        "coupons": len(coupons),
        "settings": len(settings),
        "claims": claims,
    }
    logger.info(f"Imported backup: {counts}")
    return counts


def clear_all_data() -> None:
    """Delete every receipt, coupon, setting and claim."""
    with get_db() as conn:
        conn.execute("DELETE FROM receipts")
        conn.execute("DELETE FROM coupons")
        conn.execute("DELETE FROM settings")
        conn.execute("DELETE FROM claimed_adjustments")
    logger.warning("Cleared all stored data")
