"""
RecordSource over the database, for matcher runs.
"""
from tracker.price_adjust.adapters import RecordSource
from tracker.price_adjust.models import PromotionRecord, PurchaseRecord

from .coupons import load_promotion_records
from .receipts import load_purchase_records


class DatabaseRecordSource(RecordSource):
    """Reads every stored receipt and coupon."""

    def list_purchases(self) -> list[PurchaseRecord]:
        return load_purchase_records()

    def list_promotions(self) -> list[PromotionRecord]:
        return load_promotion_records()
