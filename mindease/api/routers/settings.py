"""
/settings — read and update the user's session-length preferences.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...settings import DEFAULTS, get_settings, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsPatch(BaseModel):
    focus_duration_minutes:       Optional[int] = Field(None, ge=5, le=90)
    short_break_duration_minutes: Optional[int] = Field(None, ge=1, le=30)


@router.get("")
def read_settings():
    """Return current settings with their defaults for reference."""
    current = get_settings()
    return {"settings": current, "defaults": DEFAULTS}


@router.put("")
def write_settings(patch: SettingsPatch):
    """Apply a partial update; takes effect on the next timer start. Persists to data/settings.json."""
    data = {k: v for k, v in patch.model_dump().items() if v is not None}
    return {"settings": update_settings(data)}
