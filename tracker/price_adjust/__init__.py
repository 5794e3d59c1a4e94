# Price adjustment matching engine
# Siloed module - no imports from the backend

from .models import (
    PurchaseLineItem,
    PurchaseRecord,
    PromotionLineItem,
    PromotionRecord,
    PriceIndexEntry,
    AdjustmentOpportunity,
    ClaimKey,
    ClaimRecord,
    MatchOutcome,
)
from .config import MatchSettings, load_config, DEFAULT_ADJUSTMENT_WINDOW_DAYS
from .index import build_price_index, PriceIndex
from .matcher import match_adjustments, adjustment_deadline, is_eligible
from .ranking import (
    sort_by_savings,
    sort_chronological,
    sort_opportunities,
    summarize,
    partition_by_eligibility,
    calculate_total_savings,
)
from .claims import (
    ClaimStore,
    InMemoryClaimStore,
    ClaimedAdjustment,
    ClaimFilter,
    overlay_claims,
    filter_by_claim_status,
    lifetime_savings,
)
from .adapters import RecordSource, InMemoryRecordSource, JsonRecordSource
from .diagnostics import diagnose
from .report import format_console, export_csv, export_xlsx

__version__ = "1.0.0"

__all__ = [
    # Models
    "PurchaseLineItem",
    "PurchaseRecord",
    "PromotionLineItem",
    "PromotionRecord",
    "PriceIndexEntry",
    "AdjustmentOpportunity",
    "ClaimKey",
    "ClaimRecord",
    "MatchOutcome",
    # Config
    "MatchSettings",
    "load_config",
    "DEFAULT_ADJUSTMENT_WINDOW_DAYS",
    # Index
    "build_price_index",
    "PriceIndex",
    # Matcher
    "match_adjustments",
    "adjustment_deadline",
    "is_eligible",
    # Ranking
    "sort_by_savings",
    "sort_chronological",
    "sort_opportunities",
    "summarize",
    "partition_by_eligibility",
    "calculate_total_savings",
    # Claims
    "ClaimStore",
    "InMemoryClaimStore",
    "ClaimedAdjustment",
    "ClaimFilter",
    "overlay_claims",
    "filter_by_claim_status",
    "lifetime_savings",
    # Adapters
    "RecordSource",
    "InMemoryRecordSource",
    "JsonRecordSource",
    # Diagnostics
    "diagnose",
    # Report
    "format_console",
    "export_csv",
    "export_xlsx",
]
