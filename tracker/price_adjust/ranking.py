"""
Ranking and aggregation of adjustment opportunities.

Two consumer-selectable orderings:
- savings: biggest adjustment first
- date: oldest purchase first (those deadlines tend to come soonest)
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Literal, Sequence

from .models import AdjustmentOpportunity

SortOrder = Literal["savings", "date"]


def sort_by_savings(opportunities: Iterable[AdjustmentOpportunity]) -> list[AdjustmentOpportunity]:
    """Highest adjustment amount first. Stable for equal amounts."""
    return sorted(opportunities, key=lambda o: o.adjustment_amount, reverse=True)


def sort_chronological(opportunities: Iterable[AdjustmentOpportunity]) -> list[AdjustmentOpportunity]:
    """Oldest purchase first. Stable for equal dates."""
    return sorted(opportunities, key=lambda o: o.purchase_date)


def sort_opportunities(
    opportunities: Iterable[AdjustmentOpportunity],
    order: SortOrder = "savings",
) -> list[AdjustmentOpportunity]:
    """Sort by the named view ("savings" or "date")."""
    if order == "savings":
        return sort_by_savings(opportunities)
    if order == "date":
        return sort_chronological(opportunities)
    raise ValueError(f"Unknown sort order: {order}")


def filter_eligible(opportunities: Iterable[AdjustmentOpportunity]) -> list[AdjustmentOpportunity]:
    """Drop opportunities whose deadline has passed."""
    return [o for o in opportunities if o.eligible]


def calculate_total_savings(
    opportunities: Iterable[AdjustmentOpportunity],
    eligible_only: bool = True,
) -> Decimal:
    """Sum of adjustment amounts, optionally only over eligible ones."""
    return sum(
        (o.adjustment_amount for o in opportunities if o.eligible or not eligible_only),
        Decimal("0"),
    )


def partition_by_eligibility(
    opportunities: Iterable[AdjustmentOpportunity],
) -> dict[str, list[AdjustmentOpportunity]]:
    """Split into {"eligible": [...], "expired": [...]}, preserving order."""
    grouped: dict[str, list[AdjustmentOpportunity]] = {"eligible": [], "expired": []}
    for opportunity in opportunities:
        grouped["eligible" if opportunity.eligible else "expired"].append(opportunity)
    return grouped


def summarize(opportunities: Sequence[AdjustmentOpportunity]) -> dict:
    """Generate summary statistics for opportunities."""
    grouped = partition_by_eligibility(opportunities)
    return {
        "total": len(opportunities),
        "eligible": len(grouped["eligible"]),
        "expired": len(grouped["expired"]),
        "total_savings": calculate_total_savings(opportunities, eligible_only=True),
        "potential_savings": calculate_total_savings(opportunities, eligible_only=False),
    }


def days_remaining(deadline: date, today: date) -> int:
    """Days left to claim; negative once the deadline has passed."""
    return (deadline - today).days
