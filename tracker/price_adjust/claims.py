"""
Claim Overlay - merge claimed/unclaimed state onto matcher output.

Claims live in an external key-value store keyed by ClaimKey
(receipt id, item code, promotion id). The matcher never sees them;
the presentation layer wraps each opportunity with its claim, if any.

The adapter pattern lets us swap stores (in-memory for tests, SQLite
in the backend) without touching the overlay logic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

from .models import AdjustmentOpportunity, ClaimKey, ClaimRecord


class ClaimFilter(Enum):
    ALL = "all"
    CLAIMED = "claimed"
    UNCLAIMED = "unclaimed"


class ClaimStore(ABC):
    """
    Abstract interface for claim persistence.

    Implementations record which adjustments have been claimed at the
    store and for how much.
    """

    @abstractmethod
    def mark_claimed(
        self, key: ClaimKey, amount: Decimal, claimed_at: Optional[datetime] = None
    ) -> ClaimRecord:
        """Record a claim, replacing any earlier one for the same key."""
        pass

    @abstractmethod
    def unmark_claimed(self, key: ClaimKey) -> bool:
        """Remove a claim. Returns True if one existed."""
        pass

    @abstractmethod
    def get_claim(self, key: ClaimKey) -> Optional[ClaimRecord]:
        pass

    @abstractmethod
    def all_claims(self) -> dict[ClaimKey, ClaimRecord]:
        pass


class InMemoryClaimStore(ClaimStore):
    """
    In-memory store for programmatic test setup and CLI runs.
    """

    def __init__(self, claims: Optional[Mapping[ClaimKey, ClaimRecord]] = None):
        self._claims: dict[ClaimKey, ClaimRecord] = dict(claims or {})

    def mark_claimed(
        self, key: ClaimKey, amount: Decimal, claimed_at: Optional[datetime] = None
    ) -> ClaimRecord:
        record = ClaimRecord(claimed_at=claimed_at or datetime.now(), amount=amount)
        self._claims[key] = record
        return record

    def unmark_claimed(self, key: ClaimKey) -> bool:
        return self._claims.pop(key, None) is not None

    def get_claim(self, key: ClaimKey) -> Optional[ClaimRecord]:
        return self._claims.get(key)

    def all_claims(self) -> dict[ClaimKey, ClaimRecord]:
        return dict(self._claims)


@dataclass(frozen=True)
class ClaimedAdjustment:
    """An opportunity together with its claim state."""
    opportunity: AdjustmentOpportunity
    claim: Optional[ClaimRecord] = None

    @property
    def claimed(self) -> bool:
        return self.claim is not None

    @property
    def claimed_at(self) -> Optional[datetime]:
        return self.claim.claimed_at if self.claim else None

    @property
    def claim_key(self) -> ClaimKey:
        return self.opportunity.claim_key


def overlay_claims(
    opportunities: Iterable[AdjustmentOpportunity],
    claims: Mapping[ClaimKey, ClaimRecord],
) -> list[ClaimedAdjustment]:
    """Attach claim state to each opportunity, preserving order."""
    return [ClaimedAdjustment(o, claims.get(o.claim_key)) for o in opportunities]


def filter_by_claim_status(
    adjustments: Iterable[ClaimedAdjustment],
    status: ClaimFilter = ClaimFilter.UNCLAIMED,
) -> list[ClaimedAdjustment]:
    if status is ClaimFilter.CLAIMED:
        return [a for a in adjustments if a.claimed]
    if status is ClaimFilter.UNCLAIMED:
        return [a for a in adjustments if not a.claimed]
    return list(adjustments)


def lifetime_savings(claims: Mapping[ClaimKey, ClaimRecord]) -> Decimal:
    """Total amount ever claimed."""
    return sum((c.amount for c in claims.values()), Decimal("0"))

