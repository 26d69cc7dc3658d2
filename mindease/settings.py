"""
User preferences — persisted to data/settings.json.

The focus engine only reads these (get_settings / focus_duration_seconds /
short_break_duration_seconds). update_settings() exists for the /settings
router, which stands in for the preference UI.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .config import config

logger = logging.getLogger(__name__)

_FILE: Path = config.data_dir / "settings.json"

DEFAULTS: dict[str, Any] = {
    "focus_duration_minutes": 25,        # standard Pomodoro
    "short_break_duration_minutes": 5,
}

_current: dict[str, Any] = {}


def _load() -> None:
    global _current
    _current = dict(DEFAULTS)
    if _FILE.exists():
        try:
            saved = json.loads(_FILE.read_text())
            for k, v in saved.items():
                if k in DEFAULTS:
                    # coerce to the same type as the default
                    _current[k] = type(DEFAULTS[k])(v)
        except (OSError, ValueError, TypeError):
            logger.warning("Malformed settings file, using defaults", exc_info=True)


def get_settings() -> dict[str, Any]:
    """Return a copy of the current settings dict."""
    if not _current:
        _load()
    return dict(_current)


def update_settings(patch: dict[str, Any]) -> dict[str, Any]:
    """Apply *patch* (unknown keys ignored), persist to disk, return full settings."""
    if not _current:
        _load()
    for k, v in patch.items():
        if k in DEFAULTS:
            _current[k] = type(DEFAULTS[k])(v)
    _FILE.parent.mkdir(parents=True, exist_ok=True)
    _FILE.write_text(json.dumps(_current, indent=2))
    return dict(_current)


def focus_duration_seconds() -> int:
    return (get_settings()["focus_duration_minutes"] or DEFAULTS["focus_duration_minutes"]) * 60


def short_break_duration_seconds() -> int:
    minutes = get_settings()["short_break_duration_minutes"] or DEFAULTS["short_break_duration_minutes"]
    return minutes * 60


# Eagerly load on import
_load()
