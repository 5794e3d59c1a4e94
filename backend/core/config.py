"""
Centralized configuration for the Price Adjustment Tracker backend.

All environment variables and settings should be defined here
to avoid duplication across modules.
"""
import os
from functools import lru_cache

from tracker.price_adjust.config import DEFAULT_ADJUSTMENT_WINDOW_DAYS


class Settings:
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:8090,http://localhost:5173,http://127.0.0.1:8090"
    ).split(",")

    # Database
    DB_PATH: str = os.environ.get("TRACKER_DB_PATH", "data/tracker.db")

    # Default adjustment window until one is saved in the settings table
    ADJUSTMENT_WINDOW_DAYS: int = int(
        os.environ.get("TRACKER_ADJUSTMENT_WINDOW_DAYS", DEFAULT_ADJUSTMENT_WINDOW_DAYS)
    )

    # API key for protecting destructive endpoints (optional)
    API_KEY: str = os.environ.get("TRACKER_API_KEY", "")

    # Monthly coupon files (YYYY-MM.json), imported on demand
    COUPON_DIR: str = os.environ.get("TRACKER_COUPON_DIR", "data/coupons")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
