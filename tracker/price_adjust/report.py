"""
Report Generator - Format adjustments for human consumption.

Produces console output, CSV export and XLSX export.
Discount-only adjustments are estimates and are labelled as such.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence, TextIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from .models import AdjustmentOpportunity
from .ranking import days_remaining, partition_by_eligibility, summarize


def format_currency(amount: Optional[Decimal]) -> str:
    """$12.34, or $0.00 for missing amounts."""
    if amount is None:
        return "$0.00"
    return f"${Decimal(amount):.2f}"


def format_date(value: Optional[date]) -> str:
    """M/D/YYYY (no zero padding)."""
    if value is None:
        return ""
    return f"{value.month}/{value.day}/{value.year}"


def days_remaining_text(deadline: date, today: Optional[date] = None) -> str:
    """Human-readable time left to claim."""
    remaining = days_remaining(deadline, today or date.today())
    if remaining < 0:
        return "Expired"
    if remaining == 0:
        return "Expires today!"
    if remaining == 1:
        return "1 day remaining"
    return f"{remaining} days remaining"


def _adjustment_label(opp: AdjustmentOpportunity) -> str:
    if opp.is_discount_only:
        return f"up to {format_currency(opp.adjustment_amount)} (est.)"
    return format_currency(opp.adjustment_amount)


def format_console(
    opportunities: Sequence[AdjustmentOpportunity],
    today: Optional[date] = None,
    show_expired: bool = False,
) -> str:
    """
    Format adjustments for console display.

    Eligible adjustments first, expired ones only when requested. Order
    within each group is the order given.

    Args:
        opportunities: Adjustments to format (already sorted)
        today: Date for the "days remaining" column
        show_expired: Whether to include expired adjustments

    Returns:
        Formatted string for console output
    """
    if not opportunities:
        return "No price adjustments found.\n"

    today = today or date.today()
    grouped = partition_by_eligibility(opportunities)
    lines = []

    sections = [("ELIGIBLE", grouped["eligible"], "Claim before the deadline")]
    if show_expired:
        sections.append(("EXPIRED", grouped["expired"], "Deadline passed"))

    for title, rows, subtitle in sections:
        if not rows:
            continue
        lines.append(f"\n{title} ({len(rows)}) - {subtitle}")
        lines.append("-" * 78)
        lines.append(
            f"{'ITEM #':<12} {'DESCRIPTION':<22} {'PAID':>9} {'NOW':>9} {'ADJUST':>18}  {'DEADLINE'}"
        )
        lines.append("-" * 78)
        for opp in rows:
            now_str = format_currency(opp.current_price) if opp.current_price is not None else "N/A"
            lines.append(
                f"{opp.item_code:<12} {opp.description[:22]:<22} "
                f"{format_currency(opp.amount_paid):>9} {now_str:>9} "
                f"{_adjustment_label(opp):>18}  "
                f"{format_date(opp.adjustment_deadline)} ({days_remaining_text(opp.adjustment_deadline, today)})"
            )

    summary = summarize(opportunities)
    lines.append("\n" + "=" * 78)
    lines.append("SUMMARY")
    lines.append(f"  Adjustments:       {summary['total']}")
    lines.append(f"  Eligible:          {summary['eligible']}")
    lines.append(f"  Expired:           {summary['expired']}")
    lines.append(f"  Claimable savings: {format_currency(summary['total_savings'])}")
    lines.append(f"  Potential savings: {format_currency(summary['potential_savings'])}")
    lines.append("=" * 78)

    return "\n".join(lines)


CSV_COLUMNS = [
    "item_code",
    "description",
    "amount_paid",
    "current_price",
    "adjustment_amount",
    "discount_amount",
    "is_discount_only",
    "purchase_date",
    "days_before_promotion",
    "promotion_start_date",
    "promotion_valid_until",
    "adjustment_deadline",
    "eligible",
    "purchase_record_id",
    "promotion_record_id",
]


def _row(opp: AdjustmentOpportunity) -> list:
    return [
        opp.item_code,
        opp.description,
        str(opp.amount_paid),
        str(opp.current_price) if opp.current_price is not None else "",
        str(opp.adjustment_amount),
        str(opp.discount_amount) if opp.discount_amount is not None else "",
        "yes" if opp.is_discount_only else "no",
        opp.purchase_date.isoformat(),
        opp.days_before_promotion,
        opp.promotion_start_date.isoformat(),
        opp.promotion_valid_until.isoformat() if opp.promotion_valid_until else "",
        opp.adjustment_deadline.isoformat(),
        "yes" if opp.eligible else "no",
        opp.purchase_record_id,
        opp.promotion_record_id,
    ]


def export_csv(
    opportunities: Sequence[AdjustmentOpportunity],
    output: TextIO | None = None,
) -> str:
    """
    Export adjustments to CSV format.

    Args:
        opportunities: Adjustments to export
        output: Optional file handle to write to

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow(CSV_COLUMNS)
    for opp in opportunities:
        writer.writerow(_row(opp))

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content


HEADER_FILL = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
EXPIRED_FONT = Font(color="808080")


def export_xlsx(opportunities: Sequence[AdjustmentOpportunity], output_path: str | Path) -> Path:
    """
    Export adjustments to an Excel workbook.

    Money columns are written as numbers with a currency format so the
    sheet can be summed. Expired rows are greyed out.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Adjustments"

    ws.append(CSV_COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = HEADER_FILL

    money_columns = {
        CSV_COLUMNS.index(name) + 1
        for name in ("amount_paid", "current_price", "adjustment_amount", "discount_amount")
    }

    for opp in opportunities:
        values = _row(opp)
        for col in money_columns:
            raw = values[col - 1]
            values[col - 1] = float(raw) if raw != "" else None
        ws.append(values)

        row_num = ws.max_row
        for col in money_columns:
            ws.cell(row=row_num, column=col).number_format = '"$"#,##0.00'
        if not opp.eligible:
            for cell in ws[row_num]:
                cell.font = EXPIRED_FONT

    for column_cells in ws.columns:
        width = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
        ws.column_dimensions[column_cells[0].column_letter].width = min(width + 2, 40)

    ws.freeze_panes = "A2"

    path = Path(output_path)
    wb.save(path)
    return path


def generate_report_filename(extension: str = "csv") -> str:
    """
    Generate a filename for the report.

    Returns:
        Filename like "price_adjustments_2026-01-08.csv"
    """
    date_str = datetime.now().strftime("%Y-%m-%d")
    return f"price_adjustments_{date_str}.{extension}"
