"""
Adjustment Matcher - Core comparison engine.

Joins receipt line items against the promotion price index and decides,
per line item, whether a price adjustment can be claimed.

Decision flow for one line item:
| Item in index? | Source promo? | Purchase vs promo window        | Result                  |
|----------------|---------------|---------------------------------|-------------------------|
| ✗              | -             | -                               | NO_PROMOTION            |
| ✓              | ✗             | -                               | SOURCE_MISSING          |
| ✓              | ✓             | window missing/inverted         | INVALID_WINDOW          |
| ✓              | ✓             | inside [valid_from, valid_until]| BOUGHT_DURING_PROMOTION |
| ✓              | ✓             | after valid_until               | BOUGHT_AFTER_PROMOTION  |
| ✓              | ✓             | > window days before valid_from | TOO_OLD                 |
| ✓              | ✓             | within window before valid_from | EXACT_PRICE / DISCOUNT_ONLY / NOT_HIGHER |

Eligibility policy: the deadline is anchored on the promotion START date.
A purchase made up to N days before a promotion begins can be adjusted
until N days after the promotion begins.

Example:
- Purchase: Jan 1, 2026 at $24.99
- Promotion: Jan 15 - Jan 31, 2026 at $18.99
- Days before promo: 14 (within 30-day window)
- Deadline: Feb 14, 2026 (30 days from Jan 15)
- Result: $6.00 adjustment, eligible until Feb 14

The matcher is a pure function of its inputs: no shared state, no
mutation of the records passed in, and no exceptions for bad data.
Inconsistent data degrades to "no opportunity".
"""

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from .config import DEFAULT_ADJUSTMENT_WINDOW_DAYS
from .index import PriceIndex, build_price_index
from .models import (
    AdjustmentOpportunity,
    MatchOutcome,
    PromotionRecord,
    PurchaseLineItem,
    PurchaseRecord,
    UNKNOWN_DESCRIPTION,
)

logger = logging.getLogger(__name__)


# ============== Eligibility & Deadline ==============

def adjustment_deadline(promotion_start: date, window_days: int) -> date:
    """Last day an adjustment may be claimed: promotion start + window."""
    return promotion_start + timedelta(days=window_days)


def is_eligible(deadline: date, today: date) -> bool:
    """Claims remain open through the deadline day itself."""
    return today <= deadline


def days_before(promotion_start: date, purchase_date: date) -> int:
    """Whole days between the purchase and the promotion start."""
    return (promotion_start - purchase_date).days


# ============== Matching ==============

def index_promotions_by_id(promotions: Iterable[PromotionRecord]) -> dict[str, PromotionRecord]:
    """Map promotion id -> record. The first record with a given id wins."""
    by_id: dict[str, PromotionRecord] = {}
    for promotion in promotions:
        by_id.setdefault(promotion.id, promotion)
    return by_id


def evaluate_line_item(
    purchase: PurchaseRecord,
    item: PurchaseLineItem,
    price_index: PriceIndex,
    promotions_by_id: dict[str, PromotionRecord],
    window_days: int,
    today: date,
) -> tuple[MatchOutcome, Optional[AdjustmentOpportunity]]:
    """
    Decide what a single receipt line item is owed.

    Returns:
        (outcome, opportunity) - opportunity is None unless the outcome
        is EXACT_PRICE or DISCOUNT_ONLY
    """
    entry = price_index.lookup(item.item_code)
    if entry is None:
        return MatchOutcome.NO_PROMOTION, None

    promotion = promotions_by_id.get(entry.source_promotion_id)
    if promotion is None:
        return MatchOutcome.SOURCE_MISSING, None

    if not promotion.is_well_formed:
        return MatchOutcome.INVALID_WINDOW, None

    purchase_date = purchase.purchase_date

    # Bought during the promotion - already got the sale price
    if promotion.contains(purchase_date):
        return MatchOutcome.BOUGHT_DURING_PROMOTION, None

    if purchase_date > promotion.valid_until:
        return MatchOutcome.BOUGHT_AFTER_PROMOTION, None

    # Only purchases before the promotion start remain
    days_before_promotion = days_before(promotion.valid_from, purchase_date)
    if days_before_promotion > window_days:
        return MatchOutcome.TOO_OLD, None

    deadline = adjustment_deadline(promotion.valid_from, window_days)
    eligible = is_eligible(deadline, today)
    description = item.description or entry.description or UNKNOWN_DESCRIPTION

    if entry.has_definite_price:
        if item.final_price <= entry.price:
            return MatchOutcome.NOT_HIGHER, None
        outcome = MatchOutcome.EXACT_PRICE
        current_price = entry.price
        adjustment = item.final_price - entry.price
    elif entry.has_discount:
        # True post-discount price is unknown; assume the full discount
        outcome = MatchOutcome.DISCOUNT_ONLY
        current_price = None
        adjustment = entry.discount
    else:
        return MatchOutcome.NOT_HIGHER, None

    opportunity = AdjustmentOpportunity(
        item_code=item.item_code,
        description=description,
        amount_paid=item.final_price,
        current_price=current_price,
        adjustment_amount=adjustment,
        discount_amount=entry.discount if entry.has_discount else None,
        is_discount_only=outcome is MatchOutcome.DISCOUNT_ONLY,
        purchase_date=purchase_date,
        days_before_promotion=days_before_promotion,
        promotion_start_date=promotion.valid_from,
        adjustment_deadline=deadline,
        promotion_valid_until=entry.valid_until,
        eligible=eligible,
        purchase_record_id=purchase.id,
        promotion_record_id=entry.source_promotion_id,
    )
    return outcome, opportunity


def match_adjustments(
    purchases: Sequence[PurchaseRecord],
    promotions: Sequence[PromotionRecord],
    window_days: int = DEFAULT_ADJUSTMENT_WINDOW_DAYS,
    today: Optional[date] = None,
    price_index: Optional[PriceIndex] = None,
) -> list[AdjustmentOpportunity]:
    """
    Find every price adjustment owed across all receipts.

    Args:
        purchases: Receipts to check
        promotions: All known promotions (used to resolve index sources)
        window_days: Adjustment window policy in days
        today: Date used for eligibility (defaults to date.today())
        price_index: Pre-built index; built from promotions when omitted

    Returns:
        Unordered list of AdjustmentOpportunity. Each receipt line is an
        independent claim - repeat purchases are not deduplicated.
    """
    today = today or date.today()
    if price_index is None:
        price_index = build_price_index(promotions)
    promotions_by_id = index_promotions_by_id(promotions)

    opportunities = []
    outcomes: Counter = Counter()

    for purchase in purchases:
        for item in purchase.items or []:
            if item is None or item.final_price is None:
                continue

            outcome, opportunity = evaluate_line_item(
                purchase, item, price_index, promotions_by_id, window_days, today
            )
            outcomes[outcome] += 1

            if opportunity is None:
                logger.debug(
                    f"No adjustment for item {item.item_code} on receipt {purchase.id}: {outcome.value}"
                )
                continue
            opportunities.append(opportunity)

    logger.info(
        f"Matched {len(opportunities)} adjustments from {len(purchases)} receipts "
        f"against {len(price_index)} promoted items (window {window_days} days)"
    )
    if outcomes[MatchOutcome.SOURCE_MISSING]:
        logger.warning(
            f"{outcomes[MatchOutcome.SOURCE_MISSING]} line items referenced a promotion "
            f"missing from the promotion set"
        )

    return opportunities
