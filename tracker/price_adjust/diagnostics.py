"""
Diagnostics - explain why receipts did or did not produce adjustments.

Runs the same per-line decision as the matcher, but keeps every
outcome instead of only the opportunities.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from .config import DEFAULT_ADJUSTMENT_WINDOW_DAYS
from .index import build_price_index
from .matcher import evaluate_line_item, index_promotions_by_id
from .models import (
    AdjustmentOpportunity,
    MatchOutcome,
    PromotionRecord,
    PurchaseRecord,
)


REASONS = {
    MatchOutcome.EXACT_PRICE: "Paid more than the promotional price",
    MatchOutcome.DISCOUNT_ONLY: "Promotion discount applies (estimated)",
    MatchOutcome.NO_PROMOTION: "No promotion lists this item number",
    MatchOutcome.SOURCE_MISSING: "Promotion for this item could not be found",
    MatchOutcome.INVALID_WINDOW: "Promotion has missing or inverted dates",
    MatchOutcome.BOUGHT_DURING_PROMOTION: "Bought during the promotion - already discounted",
    MatchOutcome.BOUGHT_AFTER_PROMOTION: "Bought after the promotion ended",
    MatchOutcome.TOO_OLD: "Bought too long before the promotion started",
    MatchOutcome.NOT_HIGHER: "Paid no more than the promotional price",
}


@dataclass
class LineDiagnosis:
    """Outcome for one receipt line."""
    purchase_record_id: str
    purchase_date: date
    item_code: str
    outcome: MatchOutcome
    opportunity: Optional[AdjustmentOpportunity] = None

    @property
    def reason(self) -> str:
        return REASONS[self.outcome]


def diagnose(
    purchases: Sequence[PurchaseRecord],
    promotions: Sequence[PromotionRecord],
    window_days: int = DEFAULT_ADJUSTMENT_WINDOW_DAYS,
    today: Optional[date] = None,
) -> list[LineDiagnosis]:
    """Classify every receipt line item against the promotions."""
    today = today or date.today()
    price_index = build_price_index(promotions)
    promotions_by_id = index_promotions_by_id(promotions)

    diagnoses = []
    for purchase in purchases:
        for item in purchase.items or []:
            if item is None or item.final_price is None:
                continue
            outcome, opportunity = evaluate_line_item(
                purchase, item, price_index, promotions_by_id, window_days, today
            )
            diagnoses.append(
                LineDiagnosis(
                    purchase_record_id=purchase.id,
                    purchase_date=purchase.purchase_date,
                    item_code=item.item_code,
                    outcome=outcome,
                    opportunity=opportunity,
                )
            )
    return diagnoses


def shared_item_codes(
    purchases: Sequence[PurchaseRecord],
    promotions: Sequence[PromotionRecord],
) -> set[str]:
    """Item codes that appear on both a receipt and a promotion."""
    bought = {item.item_code for p in purchases for item in p.items or []}
    promoted = {item.item_code for p in promotions for item in p.items or []}
    return bought & promoted


def outcome_counts(diagnoses: Sequence[LineDiagnosis]) -> dict[str, int]:
    """Count diagnoses by outcome name."""
    counts = Counter(d.outcome.value for d in diagnoses)
    return {outcome.value: counts.get(outcome.value, 0) for outcome in MatchOutcome}
