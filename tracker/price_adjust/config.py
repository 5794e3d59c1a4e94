"""
Configuration for Price Adjustment Tracker.

Holds the adjustment policy parameters. Config is declarative JSON -
edit the file, not the code.
"""

import json
from dataclasses import dataclass
from pathlib import Path


DEFAULT_ADJUSTMENT_WINDOW_DAYS = 30

# Key the stored window lives under in a backup's settings object
ADJUSTMENT_WINDOW_SETTING = "adjustmentWindow"


@dataclass
class MatchSettings:
    """Settings for the matching algorithm."""
    adjustment_window_days: int = DEFAULT_ADJUSTMENT_WINDOW_DAYS
    show_expired: bool = False

    def __post_init__(self):
        self.adjustment_window_days = validate_window_days(self.adjustment_window_days)


def validate_window_days(value) -> int:
    """
    Coerce and check an adjustment window.

    Raises:
        ValueError: if the value is not a whole number of days or is negative
    """
    if isinstance(value, bool):
        raise ValueError(f"Adjustment window must be a whole number of days, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ValueError(f"Adjustment window must be a whole number of days, got {value!r}")
    if value < 0:
        raise ValueError(f"Adjustment window cannot be negative: {value}")
    return value


def load_config(config_path: str | Path) -> MatchSettings:
    """
    Load match settings from a JSON file.

    Expected shape:
        {"settings": {"adjustment_window_days": 30, "show_expired": false}}

    Missing keys fall back to defaults.

    Args:
        config_path: Path to the settings file

    Returns:
        MatchSettings
    """
    path = Path(config_path)
    with open(path, "r") as f:
        data = json.load(f)

    settings_data = data.get("settings", {})
    return MatchSettings(
        adjustment_window_days=settings_data.get(
            "adjustment_window_days", DEFAULT_ADJUSTMENT_WINDOW_DAYS
        ),
        show_expired=bool(settings_data.get("show_expired", False)),
    )
