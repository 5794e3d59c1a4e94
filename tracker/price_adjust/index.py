"""
Price Index - Best known promotional terms per item code.

Instead of scanning every promotion for every receipt line, we reduce
all promotion line items once into a dict keyed by item code:
- price: lowest definite sale price wins (strictly lower replaces)
- discount: largest discount wins (strictly greater replaces)

Ties keep the first sighting, so the result is deterministic for a
given promotion order.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import PriceIndexEntry, PromotionRecord


@dataclass
class PriceIndex:
    """
    Indexed promotions for fast lookups.

    Attributes:
        entries: Dict mapping item code -> PriceIndexEntry
        promotion_count: Number of promotions reduced into the index
        skipped_count: Line items with neither a price nor a discount
    """
    entries: dict[str, PriceIndexEntry] = field(default_factory=dict)
    promotion_count: int = 0
    skipped_count: int = 0

    def lookup(self, item_code: str) -> Optional[PriceIndexEntry]:
        """Look up the best known terms for an item code."""
        return self.entries.get(item_code)

    def __contains__(self, item_code: str) -> bool:
        return item_code in self.entries

    def __len__(self) -> int:
        return len(self.entries)


def build_price_index(promotions: Iterable[PromotionRecord]) -> PriceIndex:
    """
    Build the per-item-code price index from all promotions.

    Price and discount are tracked independently: a later promotion can
    improve the discount without becoming the price source. The source
    promotion only moves when the price improves.

    Args:
        promotions: Every known promotion record

    Returns:
        PriceIndex keyed by item code
    """
    index = PriceIndex()

    for promotion in promotions:
        index.promotion_count += 1

        for item in promotion.items or []:
            if not item.participates:
                index.skipped_count += 1
                continue

            entry = index.entries.get(item.item_code)
            if entry is None:
                index.entries[item.item_code] = PriceIndexEntry(
                    item_code=item.item_code,
                    price=item.sale_price if item.has_definite_price else None,
                    discount=item.discount_amount if item.has_discount else None,
                    source_promotion_id=promotion.id,
                    valid_until=promotion.valid_until,
                    description=item.description,
                )
                continue

            # Lowest known price wins
            if item.has_definite_price and (
                not entry.has_definite_price or item.sale_price < entry.price
            ):
                entry.price = item.sale_price
                entry.source_promotion_id = promotion.id

            # Largest known discount wins
            if item.has_discount and (
                not entry.has_discount or item.discount_amount > entry.discount
            ):
                entry.discount = item.discount_amount

    return index
