"""
Data models for Price Adjustment Tracker.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Money values use Decimal for precision. Dates are calendar dates (no time).

Presence of a promotional price or discount is an explicit check
(value present and > 0), never a truthiness test on the number.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, NamedTuple, Optional


UNKNOWN_DESCRIPTION = "Unknown Item"


def _positive(value: Optional[Decimal]) -> bool:
    return value is not None and value > 0


class MatchOutcome(Enum):
    """
    Why a purchase line item did or did not produce an adjustment.

    Only EXACT_PRICE and DISCOUNT_ONLY carry an opportunity.
    """
    EXACT_PRICE = "EXACT_PRICE"                          # Paid more than a known sale price
    DISCOUNT_ONLY = "DISCOUNT_ONLY"                      # Only a discount is known - estimate
    NO_PROMOTION = "NO_PROMOTION"                        # No promotion lists this item code
    SOURCE_MISSING = "SOURCE_MISSING"                    # Index points at an unknown promotion
    INVALID_WINDOW = "INVALID_WINDOW"                    # Promotion dates missing or inverted
    BOUGHT_DURING_PROMOTION = "BOUGHT_DURING_PROMOTION"  # Already got the sale price
    BOUGHT_AFTER_PROMOTION = "BOUGHT_AFTER_PROMOTION"    # Promotion was over
    TOO_OLD = "TOO_OLD"                                  # Bought too long before the promotion
    NOT_HIGHER = "NOT_HIGHER"                            # Paid no more than the sale price

    @property
    def has_opportunity(self) -> bool:
        return self in (MatchOutcome.EXACT_PRICE, MatchOutcome.DISCOUNT_ONLY)


@dataclass
class PurchaseLineItem:
    """A single line on a receipt."""
    item_code: str              # Opaque join key, may look numeric
    final_price: Decimal        # What was actually paid
    description: Optional[str] = None


@dataclass
class PurchaseRecord:
    """
    A receipt: one shopping trip with its line items.

    The id is assigned by whatever store persisted the receipt.
    """
    id: str
    purchase_date: date
    items: list[PurchaseLineItem] = field(default_factory=list)
    upload_date: Optional[datetime] = None
    total: Optional[Decimal] = None


@dataclass
class PromotionLineItem:
    """A single item on a coupon/promotion."""
    item_code: str
    sale_price: Optional[Decimal] = None        # Definite promotional price, when known
    discount_amount: Optional[Decimal] = None   # "$X OFF" when the final price is unknown
    description: Optional[str] = None

    @property
    def has_definite_price(self) -> bool:
        return _positive(self.sale_price)

    @property
    def has_discount(self) -> bool:
        return _positive(self.discount_amount)

    @property
    def participates(self) -> bool:
        """Line items with neither a price nor a discount are ignored by matching."""
        return self.has_definite_price or self.has_discount


@dataclass
class PromotionRecord:
    """A coupon book entry with an inclusive validity window."""
    id: str
    valid_from: Optional[date]
    valid_until: Optional[date]
    items: list[PromotionLineItem] = field(default_factory=list)
    title: Optional[str] = None

    @property
    def is_well_formed(self) -> bool:
        if self.valid_from is None or self.valid_until is None:
            return False
        return self.valid_from <= self.valid_until

    def contains(self, day: date) -> bool:
        """True if day falls inside [valid_from, valid_until]."""
        if not self.is_well_formed:
            return False
        return self.valid_from <= day <= self.valid_until


@dataclass
class PriceIndexEntry:
    """
    Best known promotional terms for one item code.

    Rebuilt on every matching run, never persisted.
    """
    item_code: str
    price: Optional[Decimal]            # Lowest definite sale price seen
    discount: Optional[Decimal]         # Largest discount seen
    source_promotion_id: str            # Promotion that supplied the current price
    valid_until: Optional[date] = None
    description: Optional[str] = None

    @property
    def has_definite_price(self) -> bool:
        return _positive(self.price)

    @property
    def has_discount(self) -> bool:
        return _positive(self.discount)


class ClaimKey(NamedTuple):
    """Identity of a claimable adjustment: which receipt, which item, which promotion."""
    purchase_record_id: str
    item_code: str
    promotion_record_id: str

    def to_storage_key(self) -> str:
        """String form used by stored claim data: receipt_item_promotion."""
        return f"{self.purchase_record_id}_{self.item_code}_{self.promotion_record_id}"

    @classmethod
    def from_storage_key(
        cls, storage_key: str, purchases: Iterable["PurchaseRecord"]
    ) -> Optional["ClaimKey"]:
        """
        Recover the parts of a storage key.

        Ids may contain underscores themselves, so the key is split by
        matching it against known receipts and their item codes. Returns
        None when no receipt line matches.
        """
        for purchase in purchases:
            prefix = f"{purchase.id}_"
            if not storage_key.startswith(prefix):
                continue
            rest = storage_key[len(prefix):]
            for item in purchase.items or []:
                item_prefix = f"{item.item_code}_"
                if rest.startswith(item_prefix) and len(rest) > len(item_prefix):
                    return cls(purchase.id, item.item_code, rest[len(item_prefix):])
        return None


@dataclass
class ClaimRecord:
    """When an adjustment was claimed and for how much."""
    claimed_at: datetime
    amount: Decimal


@dataclass(frozen=True)
class AdjustmentOpportunity:
    """
    One candidate price-adjustment claim.

    Derived from exactly one purchase line item and the price index entry
    for its item code. Never mutated after creation; claim state is
    attached externally via claim_key.

    promotion_valid_until comes from the first promotion seen for the item
    code, not from the source promotion, so it can fall before
    promotion_start_date when a later coupon lowered the price.
    """
    item_code: str
    description: str
    amount_paid: Decimal
    current_price: Optional[Decimal]    # None for discount-only promotions
    adjustment_amount: Decimal          # Estimated (= discount) when is_discount_only
    discount_amount: Optional[Decimal]
    is_discount_only: bool
    purchase_date: date
    days_before_promotion: int
    promotion_start_date: date
    adjustment_deadline: date
    promotion_valid_until: Optional[date]
    eligible: bool
    purchase_record_id: str
    promotion_record_id: str

    @property
    def claim_key(self) -> ClaimKey:
        return ClaimKey(self.purchase_record_id, self.item_code, self.promotion_record_id)
