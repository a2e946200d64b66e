"""Loading and saving of user tunable session settings.

Settings are kept as a list of dictionaries so their order survives a round
trip through the file.  Each dictionary has ``key``, ``value`` and ``type``
entries.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from workout_core import DEFAULT_REST_DURATION, DRAG_SETTLE_DELAY, REST_ADJUST_STEPS

# JSON file the settings are persisted to.
SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "settings.json"

DEFAULT_SETTINGS: list[dict[str, Any]] = [
    {"key": "rest_adjust_steps", "value": list(REST_ADJUST_STEPS), "type": "list"},
    {"key": "default_rest_seconds", "value": DEFAULT_REST_DURATION, "type": "int"},
    {"key": "auto_start_rest_timer", "value": True, "type": "bool"},
    {"key": "drag_settle_delay", "value": DRAG_SETTLE_DELAY, "type": "float"},
    {"key": "ghost_row_height", "value": 24.0, "type": "float"},
    {"key": "card_row_height", "value": 72.0, "type": "float"},
]

# Settings are only read from disk once per process.
_settings_cache: list[dict[str, Any]] | None = None


def _defaults() -> list[dict[str, Any]]:
    return [dict(item) for item in DEFAULT_SETTINGS]


def _with_missing_defaults(data: list[dict[str, Any]]) -> list[dict[str, Any]]:
    known = {item.get("key") for item in data}
    return data + [dict(item) for item in DEFAULT_SETTINGS if item["key"] not in known]


def load_settings() -> list[dict[str, Any]]:
    """Load settings from :data:`SETTINGS_PATH`, creating it with defaults."""

    if SETTINGS_PATH.exists():
        try:
            with SETTINGS_PATH.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError):
            logging.exception("Could not read settings from %s", SETTINGS_PATH)
        else:
            if isinstance(data, list):
                return _with_missing_defaults(data)
            logging.warning("Ignoring malformed settings file %s", SETTINGS_PATH)
    settings = _defaults()
    save_settings(settings)
    return settings


def save_settings(settings: list[dict[str, Any]]) -> None:
    """Persist ``settings`` to :data:`SETTINGS_PATH`."""

    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with SETTINGS_PATH.open("w", encoding="utf-8") as fh:
        json.dump(settings, fh)


def get_settings() -> list[dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""

    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def reset_cache() -> None:
    global _settings_cache
    _settings_cache = None


def get_value(key: str, default: Any = None) -> Any:
    """Fetch the value associated with ``key``."""

    for item in get_settings():
        if item.get("key") == key:
            return item.get("value")
    return default


def set_value(key: str, value: Any) -> None:
    """Update ``key`` with ``value`` and persist the change."""

    settings = get_settings()
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings)
