"""
Tests for the SQLite record store.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from tracker.price_adjust.claims import lifetime_savings
from tracker.price_adjust.models import (
    ClaimKey,
    PromotionLineItem,
    PromotionRecord,
    PurchaseLineItem,
    PurchaseRecord,
)
from backend.core.db import (
    DatabaseRecordSource,
    SqliteClaimStore,
    clear_all_data,
    delete_coupon,
    delete_receipt,
    export_all_data,
    get_adjustment_window,
    get_all_settings,
    get_claim,
    get_coupon,
    get_receipt,
    get_setting,
    get_stats,
    import_data,
    list_claims,
    list_coupons,
    list_receipts,
    mark_adjustment_claimed,
    save_coupon,
    save_receipt,
    set_adjustment_window,
    set_setting,
    unmark_adjustment_claimed,
)


def _receipt(receipt_id="r1", purchase_date=date(2026, 1, 1), *items):
    items = list(items) or [PurchaseLineItem("123456", Decimal("24.99"), "TV")]
    return PurchaseRecord(id=receipt_id, purchase_date=purchase_date, items=items)


def _coupon(coupon_id="p1", valid_from=date(2026, 1, 15), valid_until=date(2026, 1, 31)):
    return PromotionRecord(
        id=coupon_id,
        valid_from=valid_from,
        valid_until=valid_until,
        items=[PromotionLineItem("123456", sale_price=Decimal("18.99"))],
    )


class TestReceipts:

    def test_save_and_get(self, patch_db):
        data = save_receipt(_receipt())
        assert data["id"] == "r1"
        assert data["uploadDate"] is not None

        stored = get_receipt("r1")
        assert stored["purchaseDate"] == "2026-01-01"
        assert stored["items"][0] == {"itemNumber": "123456", "finalPrice": 24.99, "description": "TV"}

    def test_save_does_not_mutate_record(self, patch_db):
        record = _receipt()
        save_receipt(record)
        assert record.upload_date is None

    def test_get_missing(self, patch_db):
        assert get_receipt("nope") is None

    def test_list_newest_first_with_range(self, patch_db):
        save_receipt(_receipt("r1", date(2026, 1, 1)))
        save_receipt(_receipt("r2", date(2026, 1, 10)))
        save_receipt(_receipt("r3", date(2025, 12, 1)))

        assert [r["id"] for r in list_receipts()] == ["r2", "r1", "r3"]
        in_january = list_receipts(start_date=date(2026, 1, 1), end_date=date(2026, 1, 31))
        assert [r["id"] for r in in_january] == ["r2", "r1"]
        assert len(list_receipts(limit=1)) == 1

    def test_save_same_id_replaces(self, patch_db):
        save_receipt(_receipt("r1", date(2026, 1, 1)))
        save_receipt(_receipt("r1", date(2026, 1, 5)))
        assert len(list_receipts()) == 1
        assert get_receipt("r1")["purchaseDate"] == "2026-01-05"

    def test_delete(self, patch_db):
        save_receipt(_receipt())
        assert delete_receipt("r1") is True
        assert delete_receipt("r1") is False


class TestCoupons:

    def test_save_and_get(self, patch_db):
        save_coupon(_coupon())
        stored = get_coupon("p1")
        assert stored["validFrom"] == "2026-01-15"
        assert stored["items"][0]["salePrice"] == 18.99

    def test_active_only(self, patch_db):
        save_coupon(_coupon("old", date(2025, 11, 1), date(2025, 11, 30)))
        save_coupon(_coupon("current"))
        save_coupon(PromotionRecord(id="open", valid_from=date(2026, 1, 1), valid_until=None))

        all_ids = [c["id"] for c in list_coupons()]
        active_ids = [c["id"] for c in list_coupons(active_only=True, today=date(2026, 1, 20))]
        assert all_ids == ["old", "current", "open"]
        assert active_ids == ["current", "open"]

    def test_expires_at_end_of_last_day(self, patch_db):
        save_coupon(_coupon())
        assert list_coupons(active_only=True, today=date(2026, 1, 31))
        assert not list_coupons(active_only=True, today=date(2026, 2, 1))

    def test_delete(self, patch_db):
        save_coupon(_coupon())
        assert delete_coupon("p1") is True
        assert get_coupon("p1") is None


class TestSettings:

    def test_get_default(self, patch_db):
        assert get_setting("missing", "fallback") == "fallback"

    def test_set_and_overwrite(self, patch_db):
        set_setting("theme", "dark")
        set_setting("theme", "light")
        assert get_setting("theme") == "light"
        assert get_all_settings() == {"theme": "light"}

    def test_adjustment_window_default(self, patch_db):
        assert get_adjustment_window() == 30

    def test_adjustment_window_saved(self, patch_db):
        assert set_adjustment_window(14) == 14
        assert get_adjustment_window() == 14

    def test_adjustment_window_rejects_negative(self, patch_db):
        with pytest.raises(ValueError):
            set_adjustment_window(-1)


class TestClaims:

    def test_mark_and_unmark(self, patch_db):
        key = ClaimKey("r1", "123456", "p1")
        row = mark_adjustment_claimed(key, Decimal("6.00"), datetime(2026, 1, 20, 9, 0))

        assert row["storage_key"] == "r1_123456_p1"
        assert row["amount"] == 6.0
        assert get_claim("r1_123456_p1")["claimed_at"] == "2026-01-20T09:00:00"
        assert unmark_adjustment_claimed("r1_123456_p1") is True
        assert unmark_adjustment_claimed("r1_123456_p1") is False
        assert list_claims() == []

    def test_lifetime_savings(self, patch_db):
        mark_adjustment_claimed(ClaimKey("r1", "1", "p1"), Decimal("6.00"))
        mark_adjustment_claimed(ClaimKey("r2", "2", "p1"), Decimal("3.50"))
        assert lifetime_savings(SqliteClaimStore().all_claims()) == Decimal("9.50")

    def test_sqlite_claim_store(self, patch_db):
        store = SqliteClaimStore()
        key = ClaimKey("r1", "123456", "p1")
        record = store.mark_claimed(key, Decimal("6.00"))

        assert record.amount == Decimal("6.0")
        assert store.get_claim(key).amount == Decimal("6.0")
        assert list(store.all_claims()) == [key]
        assert store.unmark_claimed(key) is True
        assert store.get_claim(key) is None


class TestStats:

    def test_counts(self, patch_db):
        save_receipt(_receipt("r1", date(2026, 1, 1),
                              PurchaseLineItem("1", Decimal("1")), PurchaseLineItem("2", Decimal("2"))))
        save_receipt(_receipt("r2"))
        save_coupon(_coupon())
        assert get_stats() == {"receipts": 2, "coupons": 1, "items": 3, "claims": 0}


class TestBackup:

    def test_import_browser_backup(self, patch_db, backup_document):
        counts = import_data(backup_document)

        assert counts == {"receipts": 1, "coupons": 1, "settings": 1, "claims": 1}
        assert get_adjustment_window() == 30
        claim = get_claim("receipt_1767225600000_123456_coupon_2026_01_a")
        assert claim["purchase_record_id"] == "receipt_1767225600000"
        assert claim["item_code"] == "123456"
        assert claim["promotion_record_id"] == "coupon_2026_01_a"

    def test_export_reimport(self, patch_db, backup_document):
        import_data(backup_document)
        exported = export_all_data()

        assert exported["version"] == 1
        assert [r["id"] for r in exported["receipts"]] == ["receipt_1767225600000"]
        assert "receipt_1767225600000_123456_coupon_2026_01_a" in exported["settings"]["claimedAdjustments"]

        clear_all_data()
        assert get_stats()["receipts"] == 0

        import_data(exported)
        assert get_stats() == {"receipts": 1, "coupons": 1, "items": 1, "claims": 1}

    def test_bad_records_skipped(self, patch_db):
        counts = import_data({
            "receipts": [{"id": "r1"}, {"id": "r2", "purchaseDate": "2026-01-01", "items": []}],
            "coupons": "not a list",
        })
        assert counts["receipts"] == 1
        assert counts["coupons"] == 0

    def test_unresolvable_claim_skipped(self, patch_db):
        counts = import_data({"settings": {"claimedAdjustments": {"mystery": {"amount": 1}}}})
        assert counts["claims"] == 0

    def test_not_an_object(self, patch_db):
        with pytest.raises(ValueError):
            import_data(["receipts"])

    @pytest.mark.parametrize("window", [-5, "abc", 2.5])
    def test_bad_adjustment_window_rejected(self, patch_db, backup_document, window):
        backup_document["settings"]["adjustmentWindow"] = window
        with pytest.raises(ValueError):
            import_data(backup_document)

        assert get_stats()["receipts"] == 0
        assert get_adjustment_window() == 30

    def test_adjustment_window_coerced(self, patch_db):
        import_data({"settings": {"adjustmentWindow": "14"}})
        assert get_adjustment_window() == 14


class TestDatabaseRecordSource:

    def test_lists_engine_records(self, patch_db):
        save_receipt(_receipt())
        save_coupon(_coupon())

        source = DatabaseRecordSource()
        purchases = source.list_purchases()
        promotions = source.list_promotions()

        assert purchases[0].id == "r1"
        assert purchases[0].items[0].final_price == Decimal("24.99")
        assert promotions[0].valid_until == date(2026, 1, 31)
        assert promotions[0].items[0].sale_price == Decimal("18.99")
