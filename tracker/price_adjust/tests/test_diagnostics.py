"""
Tests for match diagnostics.

Run with: pytest tracker/price_adjust/tests/test_diagnostics.py -v
"""

from datetime import date
from decimal import Decimal

from tracker.price_adjust.diagnostics import (
    REASONS,
    diagnose,
    outcome_counts,
    shared_item_codes,
)
from tracker.price_adjust.matcher import match_adjustments
from tracker.price_adjust.models import (
    MatchOutcome,
    PromotionLineItem,
    PromotionRecord,
    PurchaseLineItem,
    PurchaseRecord,
)


TODAY = date(2026, 1, 20)


def _data():
    promotions = [
        PromotionRecord(
            id="p1", valid_from=date(2026, 1, 15), valid_until=date(2026, 1, 31),
            items=[
                PromotionLineItem("123456", sale_price=Decimal("18.99")),
                PromotionLineItem("999", discount_amount=Decimal("10")),
            ],
        ),
    ]
    purchases = [
        PurchaseRecord(id="r1", purchase_date=date(2026, 1, 1), items=[
            PurchaseLineItem("123456", Decimal("24.99")),
            PurchaseLineItem("999", Decimal("29.99")),
            PurchaseLineItem("555", Decimal("3.00")),
        ]),
        PurchaseRecord(id="r2", purchase_date=date(2026, 1, 18), items=[
            PurchaseLineItem("123456", Decimal("24.99")),
        ]),
        PurchaseRecord(id="r3", purchase_date=date(2025, 10, 1), items=[
            PurchaseLineItem("123456", Decimal("24.99")),
        ]),
    ]
    return purchases, promotions


class TestDiagnose:

    def test_one_diagnosis_per_line(self):
        purchases, promotions = _data()
        diagnoses = diagnose(purchases, promotions, 30, today=TODAY)
        assert [(d.purchase_record_id, d.item_code, d.outcome) for d in diagnoses] == [
            ("r1", "123456", MatchOutcome.EXACT_PRICE),
            ("r1", "999", MatchOutcome.DISCOUNT_ONLY),
            ("r1", "555", MatchOutcome.NO_PROMOTION),
            ("r2", "123456", MatchOutcome.BOUGHT_DURING_PROMOTION),
            ("r3", "123456", MatchOutcome.TOO_OLD),
        ]

    def test_agrees_with_matcher(self):
        purchases, promotions = _data()
        diagnoses = diagnose(purchases, promotions, 30, today=TODAY)
        from_diagnosis = [d.opportunity for d in diagnoses if d.opportunity is not None]
        assert from_diagnosis == match_adjustments(purchases, promotions, 30, today=TODAY)

    def test_reason_text(self):
        purchases, promotions = _data()
        diagnosis = diagnose(purchases, promotions, 30, today=TODAY)[3]
        assert diagnosis.reason == REASONS[MatchOutcome.BOUGHT_DURING_PROMOTION]

    def test_every_outcome_has_a_reason(self):
        assert set(REASONS) == set(MatchOutcome)


class TestSummaries:

    def test_outcome_counts_include_zeroes(self):
        purchases, promotions = _data()
        counts = outcome_counts(diagnose(purchases, promotions, 30, today=TODAY))
        assert counts["EXACT_PRICE"] == 1
        assert counts["TOO_OLD"] == 1
        assert counts["NOT_HIGHER"] == 0
        assert len(counts) == len(MatchOutcome)

    def test_shared_item_codes(self):
        purchases, promotions = _data()
        assert shared_item_codes(purchases, promotions) == {"123456", "999"}
