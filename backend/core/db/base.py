"""
Database base module - connection management and initialization.
"""
import sqlite3
from pathlib import Path
from contextlib import contextmanager

from backend.core.config import settings

ROOT_DIR = Path(__file__).resolve().parents[3]

# Database location (relative paths are resolved against the repo root)
DB_PATH = Path(settings.DB_PATH)
if not DB_PATH.is_absolute():
    DB_PATH = ROOT_DIR / DB_PATH


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


SCHEMA = """
    -- Receipts: full record as camelCase JSON, purchase date indexed
    CREATE TABLE IF NOT EXISTS receipts (
        id TEXT PRIMARY KEY,
        purchase_date TEXT NOT NULL,
        upload_date TEXT,
        total REAL,
        item_count INTEGER DEFAULT 0,
        data TEXT NOT NULL,  -- JSON blob
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    );

    -- Coupons (promotions): full record as camelCase JSON
    CREATE TABLE IF NOT EXISTS coupons (
        id TEXT PRIMARY KEY,
        valid_from TEXT,
        valid_until TEXT,
        title TEXT,
        item_count INTEGER DEFAULT 0,
        data TEXT NOT NULL,  -- JSON blob
        upload_date TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    );

    -- Key/value settings, values stored as JSON
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT,
        updated_at TEXT DEFAULT CURRENT_TIMESTAMP
    );

    -- Claims keyed by receipt id + item code + coupon id
    CREATE TABLE IF NOT EXISTS claimed_adjustments (
        storage_key TEXT PRIMARY KEY,
        purchase_record_id TEXT NOT NULL,
        item_code TEXT NOT NULL,
        promotion_record_id TEXT NOT NULL,
        amount REAL NOT NULL DEFAULT 0,
        claimed_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_receipts_purchase_date ON receipts(purchase_date);
    CREATE INDEX IF NOT EXISTS idx_coupons_valid_until ON coupons(valid_until);
    CREATE INDEX IF NOT EXISTS idx_claims_receipt ON claimed_adjustments(purchase_record_id);
"""


def init_db():
    """Initialize database tables."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        # Enable WAL mode for better concurrency (allows concurrent reads during writes)
        conn.execute("PRAGMA journal_mode=WAL")
        # Set busy timeout to 5 seconds to handle lock contention
        conn.execute("PRAGMA busy_timeout=5000")

        conn.executescript(SCHEMA)
