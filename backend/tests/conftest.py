"""
Test configuration and fixtures for the backend test suite.

Provides:
- In-memory SQLite test database (isolated per test)
- FastAPI TestClient fixture
- Sample receipt/coupon payloads
"""
import sqlite3
from contextlib import contextmanager
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from backend.core.db.base import SCHEMA


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

def _create_test_db() -> sqlite3.Connection:
    """Create an in-memory SQLite database with the full schema."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA)
    return conn


@contextmanager
def _test_get_db(conn: sqlite3.Connection):
    """Replacement for get_db() that uses the shared test connection."""
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


@pytest.fixture()
def test_db():
    """Provide a fresh in-memory SQLite database for each test."""
    conn = _create_test_db()
    yield conn
    conn.close()


@pytest.fixture()
def patch_db(test_db):
    """
    Patch the get_db context manager across all db modules so that
    every database call uses the in-memory test database.
    """
    cm = lambda: _test_get_db(test_db)  # noqa: E731

    with (
        patch("backend.core.db.base.get_db", cm),
        patch("backend.core.db.receipts.get_db", cm),
        patch("backend.core.db.coupons.get_db", cm),
        patch("backend.core.db.settings.get_db", cm),
        patch("backend.core.db.claims.get_db", cm),
        patch("backend.core.db.stats.get_db", cm),
        patch("backend.core.db.backup.get_db", cm),
    ):
        yield test_db


@pytest.fixture()
def client(patch_db):
    """
    Provide a FastAPI TestClient with the database patched.

    Skips init_db so no file-backed database is created during tests.
    """
    from backend.api.main import app

    with patch("backend.api.main.init_db"):
        with TestClient(app) as c:
            yield c


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

@pytest.fixture()
def receipt_payload():
    """Receipt from Jan 1, 2026: a TV at $24.99 and paper towels at $29.99."""
    return {
        "id": "receipt_1",
        "purchase_date": "2026-01-01",
        "total": 54.98,
        "items": [
            {"item_number": "123456", "final_price": 24.99, "description": "55IN 4K TV"},
            {"item_number": "999", "final_price": 29.99, "description": "PAPER TOWELS"},
        ],
    }


@pytest.fixture()
def coupon_payload():
    """Coupon valid Jan 15 - Jan 31, 2026: TV at $18.99, $10 off paper towels."""
    return {
        "id": "coupon_1",
        "title": "January Savings",
        "valid_from": "2026-01-15",
        "valid_until": "2026-01-31",
        "items": [
            {"item_number": "123456", "sale_price": 18.99},
            {"item_number": "999", "discount": 10},
        ],
    }


@pytest.fixture()
def backup_document():
    """Backup in the browser app's export format, including a claim."""
    return {
        "version": 1,
        "exportDate": "2026-01-20T10:00:00.000Z",
        "receipts": [
            {
                "id": "receipt_1767225600000",
                "purchaseDate": "2026-01-01",
                "uploadDate": "2026-01-01T18:00:00.000Z",
                "items": [{"itemNumber": "123456", "finalPrice": 24.99, "description": "TV"}],
            },
        ],
        "coupons": [
            {
                "id": "coupon_2026_01_a",
                "validFrom": "2026-01-15",
                "validUntil": "2026-01-31",
                "items": [{"itemNumber": "123456", "salePrice": 18.99}],
            },
        ],
        "settings": {
            "adjustmentWindow": 30,
            "claimedAdjustments": {
                "receipt_1767225600000_123456_coupon_2026_01_a": {
                    "claimedDate": "2026-01-19T09:30:00.000Z",
                    "amount": 6,
                },
            },
        },
    }
