"""
Price adjustments API router.

Runs the matcher over every stored receipt and coupon, then overlays
claim state. Nothing here is persisted except claims.
"""
import logging
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response

from tracker.price_adjust import (
    ClaimFilter,
    ClaimKey,
    ClaimedAdjustment,
    filter_by_claim_status,
    lifetime_savings,
    match_adjustments,
    overlay_claims,
    sort_opportunities,
    summarize,
)
from tracker.price_adjust.diagnostics import diagnose, outcome_counts, shared_item_codes
from tracker.price_adjust.ranking import days_remaining
from tracker.price_adjust.report import export_csv, format_console, generate_report_filename

from backend.core.db import (
    DatabaseRecordSource,
    SqliteClaimStore,
    get_adjustment_window,
    get_stats,
    unmark_adjustment_claimed,
)
from backend.api.models import ClaimRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/adjustments", tags=["Adjustments"])


def _money(value):
    return float(value) if value is not None else None


def _run(today: date, sort: str = "savings"):
    """Match all stored records and overlay stored claims."""
    source = DatabaseRecordSource()
    window_days = get_adjustment_window()
    opportunities = match_adjustments(
        source.list_purchases(), source.list_promotions(), window_days, today=today
    )
    opportunities = sort_opportunities(opportunities, sort)
    claims = SqliteClaimStore().all_claims()
    return overlay_claims(opportunities, claims), claims, window_days


def _serialize(adjustment: ClaimedAdjustment, today: date) -> dict:
    opp = adjustment.opportunity
    return {
        "key": adjustment.claim_key.to_storage_key(),
        "item_code": opp.item_code,
        "description": opp.description,
        "amount_paid": _money(opp.amount_paid),
        "current_price": _money(opp.current_price),
        "adjustment_amount": _money(opp.adjustment_amount),
        "discount_amount": _money(opp.discount_amount),
        "is_discount_only": opp.is_discount_only,
        "purchase_date": opp.purchase_date.isoformat(),
        "days_before_promotion": opp.days_before_promotion,
        "promotion_start_date": opp.promotion_start_date.isoformat(),
        "promotion_valid_until": opp.promotion_valid_until.isoformat() if opp.promotion_valid_until else None,
        "adjustment_deadline": opp.adjustment_deadline.isoformat(),
        "days_remaining": days_remaining(opp.adjustment_deadline, today),
        "eligible": opp.eligible,
        "purchase_record_id": opp.purchase_record_id,
        "promotion_record_id": opp.promotion_record_id,
        "claimed": adjustment.claimed,
        "claimed_at": adjustment.claimed_at.isoformat() if adjustment.claimed_at else None,
    }


def _stats(adjustments: list[ClaimedAdjustment], claims) -> dict:
    summary = summarize([a.opportunity for a in adjustments])
    unclaimed = filter_by_claim_status(adjustments, ClaimFilter.UNCLAIMED)
    return {
        "total": summary["total"],
        "eligible": summary["eligible"],
        "expired": summary["expired"],
        "claimed": len(adjustments) - len(unclaimed),
        "total_savings": _money(summary["total_savings"]),
        "potential_savings": _money(summary["potential_savings"]),
        "unclaimed_savings": _money(
            summarize([a.opportunity for a in unclaimed])["total_savings"]
        ),
        "lifetime_savings": _money(lifetime_savings(claims)),
    }


@router.get("")
def get_adjustments(
    sort: Literal["savings", "date"] = Query("savings"),
    show_expired: bool = Query(False),
    claimed: ClaimFilter = Query(ClaimFilter.ALL),
    today: Optional[date] = Query(None)
):
    """
    Every adjustment currently owed, with claim state.

    Expired adjustments are hidden unless show_expired is set; stats
    always cover the full result.
    """
    today = today or date.today()
    adjustments, claims, window_days = _run(today, sort)

    visible = filter_by_claim_status(adjustments, claimed)
    if not show_expired:
        visible = [a for a in visible if a.opportunity.eligible]

    return {
        "adjustments": [_serialize(a, today) for a in visible],
        "count": len(visible),
        "adjustment_window_days": window_days,
        "stats": _stats(adjustments, claims),
    }


@router.get("/stats")
def get_adjustment_stats(today: Optional[date] = Query(None)):
    """Summary numbers for the dashboard."""
    adjustments, claims, window_days = _run(today or date.today())
    return {
        **_stats(adjustments, claims),
        "adjustment_window_days": window_days,
        "database": get_stats(),
    }


@router.get("/report", response_class=PlainTextResponse)
def get_adjustment_report(
    sort: Literal["savings", "date"] = Query("savings"),
    show_expired: bool = Query(False),
    today: Optional[date] = Query(None)
):
    """Formatted text report."""
    today = today or date.today()
    adjustments, _, _ = _run(today, sort)
    return format_console([a.opportunity for a in adjustments], today=today, show_expired=show_expired)


@router.get("/export.csv")
def export_adjustments_csv(
    sort: Literal["savings", "date"] = Query("savings"),
    today: Optional[date] = Query(None)
):
    """Download every adjustment (eligible and expired) as CSV."""
    adjustments, _, _ = _run(today or date.today(), sort)
    content = export_csv([a.opportunity for a in adjustments])
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{generate_report_filename("csv")}"'},
    )


@router.get("/diagnostics")
def get_diagnostics(today: Optional[date] = Query(None)):
    """Why each receipt line did or did not produce an adjustment."""
    today = today or date.today()
    source = DatabaseRecordSource()
    purchases = source.list_purchases()
    promotions = source.list_promotions()
    window_days = get_adjustment_window()

    diagnoses = diagnose(purchases, promotions, window_days, today)
    return {
        "adjustment_window_days": window_days,
        "receipt_count": len(purchases),
        "coupon_count": len(promotions),
        "shared_item_codes": sorted(shared_item_codes(purchases, promotions)),
        "outcomes": outcome_counts(diagnoses),
        "lines": [
            {
                "purchase_record_id": d.purchase_record_id,
                "purchase_date": d.purchase_date.isoformat(),
                "item_code": d.item_code,
                "outcome": d.outcome.value,
                "reason": d.reason,
            }
            for d in diagnoses
        ],
    }


@router.post("/claims")
def claim_adjustment(request: ClaimRequest):
    """Mark an adjustment as claimed at the store."""
    key = ClaimKey(request.purchase_record_id, request.item_code, request.promotion_record_id)
    record = SqliteClaimStore().mark_claimed(key, request.amount)
    logger.info(f"Claimed {key.to_storage_key()} for {request.amount}")
    return {
        "success": True,
        "key": key.to_storage_key(),
        "claimed_at": record.claimed_at.isoformat(),
        "amount": _money(record.amount),
    }


@router.delete("/claims/{storage_key:path}")
def unclaim_adjustment(storage_key: str):
    """Undo a claim."""
    if not unmark_adjustment_claimed(storage_key):
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"success": True, "message": f"Unclaimed {storage_key}"}


@router.get("/lifetime-savings")
def get_lifetime_savings_total():
    """Total amount ever claimed."""
    claims = SqliteClaimStore().all_claims()
    return {"lifetime_savings": _money(lifetime_savings(claims)), "claim_count": len(claims)}
