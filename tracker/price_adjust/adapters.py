"""
Record Adapters - Bridge to receipt and coupon data sources.

The adapter pattern lets us swap implementations (in-memory for testing,
JSON files for the CLI, SQLite in the backend) without changing matcher
logic. Every source must be fully read before a matching run starts.

Stored records use the camelCase shape of the original browser data:
    receipt: {"id", "purchaseDate", "items": [{"itemNumber", "finalPrice", "description"}]}
    coupon:  {"id", "validFrom", "validUntil", "items": [{"itemNumber", "salePrice", "discount"}]}
snake_case keys are accepted too.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterable, Optional

from .models import (
    PromotionLineItem,
    PromotionRecord,
    PurchaseLineItem,
    PurchaseRecord,
)

logger = logging.getLogger(__name__)


class RecordSource(ABC):
    """
    Abstract interface for receipt and coupon access.

    The matcher doesn't know or care where the data actually lives.
    """

    @abstractmethod
    def list_purchases(self) -> list[PurchaseRecord]:
        """Fetch every stored receipt."""
        pass

    @abstractmethod
    def list_promotions(self) -> list[PromotionRecord]:
        """Fetch every known promotion."""
        pass


class InMemoryRecordSource(RecordSource):
    """
    In-memory source for programmatic test setup.

    Useful for unit tests where you want to control exact records.
    """

    def __init__(
        self,
        purchases: Optional[list[PurchaseRecord]] = None,
        promotions: Optional[list[PromotionRecord]] = None,
    ):
        self._purchases = list(purchases or [])
        self._promotions = list(promotions or [])

    def add_purchase(self, record: PurchaseRecord):
        self._purchases.append(record)

    def add_promotion(self, record: PromotionRecord):
        self._promotions.append(record)

    def list_purchases(self) -> list[PurchaseRecord]:
        return list(self._purchases)

    def list_promotions(self) -> list[PromotionRecord]:
        return list(self._promotions)


class JsonRecordSource(RecordSource):
    """
    Loads receipts and coupons from JSON files.

    Accepted file shapes:
        Backup export:  {"receipts": [...], "coupons": [...], "settings": {...}}
        Monthly coupons: {"month": "2026-01", "coupons": [...]}
    """

    def __init__(self, paths: Iterable[str | Path]):
        self._paths = [Path(p) for p in paths]
        self._purchases: list[PurchaseRecord] = []
        self._promotions: list[PromotionRecord] = []
        self.settings: dict[str, Any] = {}
        for path in self._paths:
            self._load_file(path)

    def _load_file(self, path: Path):
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Unsupported data file layout in {path}: expected a JSON object")

        receipts = parse_purchase_records(data.get("receipts"))
        coupons = parse_promotion_records(data.get("coupons"))
        self._purchases.extend(receipts)
        self._promotions.extend(coupons)
        if isinstance(data.get("settings"), dict):
            self.settings.update(data["settings"])

        logger.info(f"Loaded {len(receipts)} receipts and {len(coupons)} coupons from {path}")

    def list_purchases(self) -> list[PurchaseRecord]:
        return list(self._purchases)

    def list_promotions(self) -> list[PromotionRecord]:
        return list(self._promotions)


def monthly_coupon_files(directory: str | Path, today: Optional[date] = None) -> list[Path]:
    """
    Coupon files for the current and next month (YYYY-MM.json).

    Coupons that span a month boundary are published in the next
    month's file, so both are read. Missing files are skipped.
    """
    today = today or date.today()
    directory = Path(directory)

    if today.month == 12:
        next_year, next_month = today.year + 1, 1
    else:
        next_year, next_month = today.year, today.month + 1

    names = [
        f"{today.year}-{today.month:02d}.json",
        f"{next_year}-{next_month:02d}.json",
    ]
    return [directory / name for name in names if (directory / name).exists()]


# ============== Parsing ==============

def _first(row: dict, *keys: str) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


def parse_money(value: Any) -> Optional[Decimal]:
    """Parse a money value to Decimal, handling numbers and "$1,234.56" strings."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        return value

    if isinstance(value, (int, float)):
        return Decimal(str(value))

    str_value = str(value).strip().replace("$", "").replace(",", "")
    if not str_value:
        return None

    try:
        return Decimal(str_value)
    except InvalidOperation:
        return None


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date ("2026-01-15", or a timestamp starting with one)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_item_code(row: dict) -> Optional[str]:
    code = _first(row, "itemNumber", "item_code", "itemCode")
    if code is None:
        return None
    code = str(code).strip()
    return code or None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def parse_purchase_item(row: Any) -> Optional[PurchaseLineItem]:
    """Parse a receipt line; None if it has no item code or usable price."""
    if not isinstance(row, dict):
        return None

    item_code = _parse_item_code(row)
    final_price = parse_money(_first(row, "finalPrice", "final_price"))
    if item_code is None or final_price is None or final_price < 0:
        return None

    return PurchaseLineItem(
        item_code=item_code,
        final_price=final_price,
        description=_first(row, "description"),
    )


def parse_purchase_record(row: Any) -> Optional[PurchaseRecord]:
    """Parse a stored receipt; None without an id or a valid purchase date."""
    if not isinstance(row, dict):
        return None

    record_id = row.get("id")
    purchase_date = parse_date(_first(row, "purchaseDate", "purchase_date"))
    if not record_id or purchase_date is None:
        logger.debug(f"Skipping receipt without id or purchase date: {row.get('id')}")
        return None

    items = []
    for raw_item in _as_list(row.get("items")):
        item = parse_purchase_item(raw_item)
        if item is not None:
            items.append(item)

    return PurchaseRecord(
        id=str(record_id),
        purchase_date=purchase_date,
        items=items,
        upload_date=parse_timestamp(_first(row, "uploadDate", "upload_date")),
        total=parse_money(row.get("total")),
    )


def parse_promotion_item(row: Any) -> Optional[PromotionLineItem]:
    """Parse a coupon line; None if it has no item code."""
    if not isinstance(row, dict):
        return None

    item_code = _parse_item_code(row)
    if item_code is None:
        return None

    return PromotionLineItem(
        item_code=item_code,
        sale_price=parse_money(_first(row, "salePrice", "sale_price")),
        discount_amount=parse_money(_first(row, "discount", "discountAmount", "discount_amount")),
        description=_first(row, "description"),
    )


def parse_promotion_record(row: Any) -> Optional[PromotionRecord]:
    """
    Parse a stored coupon; None without an id.

    Missing or bad validity dates are kept as None - the matcher treats
    such promotions as never matching.
    """
    if not isinstance(row, dict) or not row.get("id"):
        return None

    items = []
    for raw_item in _as_list(row.get("items")):
        item = parse_promotion_item(raw_item)
        if item is not None:
            items.append(item)

    return PromotionRecord(
        id=str(row["id"]),
        valid_from=parse_date(_first(row, "validFrom", "valid_from")),
        valid_until=parse_date(_first(row, "validUntil", "valid_until")),
        items=items,
        title=_first(row, "title", "name"),
    )


def parse_purchase_records(rows: Any) -> list[PurchaseRecord]:
    records = [parse_purchase_record(row) for row in _as_list(rows)]
    return [r for r in records if r is not None]


def parse_promotion_records(rows: Any) -> list[PromotionRecord]:
    records = [parse_promotion_record(row) for row in _as_list(rows)]
    return [r for r in records if r is not None]


# ============== Serialization ==============

def _money_out(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _date_out(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def purchase_to_dict(record: PurchaseRecord) -> dict:
    """Render a receipt in its stored (camelCase) form."""
    data = {
        "id": record.id,
        "purchaseDate": _date_out(record.purchase_date),
        "items": [
            {
                "itemNumber": item.item_code,
                "finalPrice": _money_out(item.final_price),
                "description": item.description,
            }
            for item in record.items
        ],
    }
    if record.upload_date:
        data["uploadDate"] = record.upload_date.isoformat()
    if record.total is not None:
        data["total"] = _money_out(record.total)
    return data


def promotion_to_dict(record: PromotionRecord) -> dict:
    """Render a coupon in its stored (camelCase) form."""
    data = {
        "id": record.id,
        "validFrom": _date_out(record.valid_from),
        "validUntil": _date_out(record.valid_until),
        "items": [
            {
                "itemNumber": item.item_code,
                "salePrice": _money_out(item.sale_price),
                "discount": _money_out(item.discount_amount),
                "description": item.description,
            }
            for item in record.items
        ],
    }
    if record.title:
        data["title"] = record.title
    return data
