"""
Shared fixtures for price adjustment engine tests.
"""

from datetime import date
from decimal import Decimal

import pytest

from tracker.price_adjust.models import AdjustmentOpportunity


@pytest.fixture
def make_opportunity():
    """Factory for AdjustmentOpportunity with sensible defaults."""

    def _make(
        item_code="123456",
        adjustment="6.00",
        purchase_date=date(2026, 1, 1),
        eligible=True,
        discount_only=False,
        purchase_record_id="r1",
        promotion_record_id="p1",
        description="TV",
    ):
        adjustment = Decimal(adjustment)
        return AdjustmentOpportunity(
            item_code=item_code,
            description=description,
            amount_paid=Decimal("24.99"),
            current_price=None if discount_only else Decimal("24.99") - adjustment,
            adjustment_amount=adjustment,
            discount_amount=adjustment if discount_only else None,
            is_discount_only=discount_only,
            purchase_date=purchase_date,
            days_before_promotion=14,
            promotion_start_date=date(2026, 1, 15),
            adjustment_deadline=date(2026, 2, 14),
            promotion_valid_until=date(2026, 1, 31),
            eligible=eligible,
            purchase_record_id=purchase_record_id,
            promotion_record_id=promotion_record_id,
        )

    return _make
