"""
CLI entry point for Price Adjustment Tracker.

Usage:
    python -m tracker.price_adjust --data backup.json
    python -m tracker.price_adjust --data receipts.json --coupon-dir coupons/ --window 14
    python -m tracker.price_adjust --data backup.json --explain --today 2026-01-20
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from .config import ADJUSTMENT_WINDOW_SETTING, MatchSettings, load_config, validate_window_days
from .adapters import JsonRecordSource, monthly_coupon_files
from .matcher import match_adjustments
from .ranking import sort_opportunities
from .diagnostics import diagnose, outcome_counts, shared_item_codes
from .report import format_console, export_csv, export_xlsx


def _parse_today(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="price_adjust",
        description="Price Adjustment Tracker - Find receipts owed a promotional price adjustment",
    )

    parser.add_argument(
        "--data",
        nargs="+",
        default=[],
        metavar="FILE",
        help="JSON files with receipts and/or coupons (backup exports or monthly coupon files)",
    )

    parser.add_argument(
        "--coupon-dir",
        metavar="DIR",
        help="Directory of monthly coupon files (YYYY-MM.json); current and next month are loaded",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Settings file with adjustment_window_days / show_expired",
    )

    parser.add_argument(
        "--window",
        type=int,
        metavar="DAYS",
        help="Adjustment window in days (overrides --config and the backup's stored window)",
    )

    parser.add_argument(
        "--today",
        type=_parse_today,
        metavar="YYYY-MM-DD",
        help="Evaluate eligibility as of this date (default: today)",
    )

    parser.add_argument(
        "--sort",
        choices=["savings", "date"],
        default="savings",
        help="Order: biggest savings first, or oldest purchase first",
    )

    parser.add_argument(
        "--show-expired",
        action="store_true",
        help="Include adjustments whose deadline has passed",
    )

    parser.add_argument(
        "--explain",
        action="store_true",
        help="Print why each receipt line did or did not match",
    )

    parser.add_argument(
        "--output-csv",
        metavar="FILE",
        help="Output CSV file path",
    )

    parser.add_argument(
        "--output-xlsx",
        metavar="FILE",
        help="Output Excel file path",
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress console output (only write exports)",
    )

    return parser


def _print_explanation(purchases, promotions, window_days, today):
    diagnoses = diagnose(purchases, promotions, window_days, today)

    print(f"\nReceipts: {len(purchases)}   Coupons: {len(promotions)}   Window: {window_days} days")
    shared = shared_item_codes(purchases, promotions)
    if not shared:
        print("No item numbers appear on both a receipt and a coupon.")
        print("Tip: item numbers must match exactly, including length.")
    else:
        print(f"Item numbers on both a receipt and a coupon: {', '.join(sorted(shared))}")

    print()
    for d in diagnoses:
        print(f"  {d.purchase_date.isoformat()}  receipt {d.purchase_record_id}  item {d.item_code:<12} {d.reason}")

    print("\nOutcomes:")
    for outcome, count in outcome_counts(diagnoses).items():
        if count:
            print(f"  {outcome:<25} {count}")


def main():
    parser = _build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    today = args.today or date.today()

    data_files = [Path(p) for p in args.data]
    if args.coupon_dir:
        coupon_dir = Path(args.coupon_dir)
        if not coupon_dir.is_dir():
            print(f"Error: Coupon directory not found: {coupon_dir}", file=sys.stderr)
            sys.exit(1)
        monthly = monthly_coupon_files(coupon_dir, today)
        if not monthly and not args.quiet:
            print(f"Warning: No coupon files for this month or next in {coupon_dir}", file=sys.stderr)
        data_files.extend(monthly)

    if not data_files:
        print("Error: No data files given (use --data and/or --coupon-dir)", file=sys.stderr)
        sys.exit(1)

    try:
        source = JsonRecordSource(data_files)
        settings = load_config(args.config) if args.config else MatchSettings()
        if args.window is not None:
            window_days = validate_window_days(args.window)
        elif not args.config and ADJUSTMENT_WINDOW_SETTING in source.settings:
            window_days = validate_window_days(source.settings[ADJUSTMENT_WINDOW_SETTING])
        else:
            window_days = settings.adjustment_window_days
        show_expired = args.show_expired or settings.show_expired

        purchases = source.list_purchases()
        promotions = source.list_promotions()

        if not args.quiet:
            print(f"Loaded {len(purchases)} receipt(s) and {len(promotions)} coupon(s)")

        opportunities = match_adjustments(purchases, promotions, window_days, today=today)
        opportunities = sort_opportunities(opportunities, args.sort)

        if not args.quiet:
            print(format_console(opportunities, today=today, show_expired=show_expired))
            if args.explain:
                _print_explanation(purchases, promotions, window_days, today)

        if args.output_csv:
            output_path = Path(args.output_csv)
            with open(output_path, "w", newline="") as f:
                export_csv(opportunities, output=f)
            if not args.quiet:
                print(f"\nCSV exported to: {output_path}")

        if args.output_xlsx:
            output_path = export_xlsx(opportunities, args.output_xlsx)
            if not args.quiet:
                print(f"\nExcel exported to: {output_path}")

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
