"""
Settings database operations (key/value, JSON-encoded values).
"""
import json
from typing import Any, Dict

from tracker.price_adjust.config import ADJUSTMENT_WINDOW_SETTING, validate_window_days

from backend.core.config import settings as app_settings

from .base import get_db

ADJUSTMENT_WINDOW_KEY = ADJUSTMENT_WINDOW_SETTING


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value, or default when unset."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT value FROM settings WHERE key = ?", (key,)
        ).fetchone()
        if row is None or row["value"] is None:
            return default
        return json.loads(row["value"])


def set_setting(key: str, value: Any) -> Any:
    """Store a setting value."""
    with get_db() as conn:
        conn.execute("""
            INSERT INTO settings (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, json.dumps(value)))
    return value


def get_all_settings() -> Dict[str, Any]:
    """Every stored setting as a dict."""
    with get_db() as conn:
        rows = conn.execute("SELECT key, value FROM settings ORDER BY key").fetchall()
        return {row["key"]: json.loads(row["value"]) if row["value"] is not None else None for row in rows}


def get_adjustment_window() -> int:
    """The configured adjustment window in days (falls back to the environment default)."""
    value = get_setting(ADJUSTMENT_WINDOW_KEY)
    if value is None:
        return app_settings.ADJUSTMENT_WINDOW_DAYS
    return validate_window_days(value)


def set_adjustment_window(days: int) -> int:
    days = validate_window_days(days)
    set_setting(ADJUSTMENT_WINDOW_KEY, days)
    return days
