"""
Alert Rules — declarative alert conditions.

Each rule maps a measurable condition over the current signals to one
AlertType. Rules say nothing about suppression; rate limiting and dedup are
applied by the AlertPolicy on top.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from ..signals.state import AlertType
from .constants import (
    ADVANCED_EXCESSIVE_TIME_THRESHOLD_MS,
    DEFAULT_FOCUS_DURATION_MINUTES,
    EXCESSIVE_TIME_THRESHOLD_MS,
    MISSING_BREAK_SESSIONS_THRESHOLD,
    PROLONGED_NAVIGATION_THRESHOLD_MS,
)


@dataclass
class AlertContext:
    """Measurements a rule may look at, taken at a single instant."""
    active_task_id: Optional[str]
    active_task_focus_ms: int        # 0 when no task is active
    consecutive_sessions: int
    navigation_ms: int
    focus_duration_minutes: int = DEFAULT_FOCUS_DURATION_MINUTES


@dataclass
class AlertRule:
    alert_type: AlertType
    priority: int                                   # 1 (highest) → 10 (lowest)
    condition: Callable[[AlertContext], bool]
    description: str = ""


def excessive_time_threshold(focus_duration_minutes: int) -> int:
    """Advanced users (longer focus preference) get the 90 min window."""
    if focus_duration_minutes > DEFAULT_FOCUS_DURATION_MINUTES:
        return ADVANCED_EXCESSIVE_TIME_THRESHOLD_MS
    return EXCESSIVE_TIME_THRESHOLD_MS


def _excessive_time(ctx: AlertContext) -> bool:
    if ctx.active_task_id is None:
        return False
    return ctx.active_task_focus_ms >= excessive_time_threshold(ctx.focus_duration_minutes)


def _missing_break(ctx: AlertContext) -> bool:
    return ctx.consecutive_sessions >= MISSING_BREAK_SESSIONS_THRESHOLD


def _prolonged_navigation(ctx: AlertContext) -> bool:
    return ctx.navigation_ms >= PROLONGED_NAVIGATION_THRESHOLD_MS


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

RULES: List[AlertRule] = [
    AlertRule(
        alert_type=AlertType.EXCESSIVE_TIME,
        priority=1,
        condition=_excessive_time,
        description="Same task in focus beyond the continuous-focus window",
    ),
    AlertRule(
        alert_type=AlertType.MISSING_BREAK,
        priority=2,
        condition=_missing_break,
        description="Several focus sessions in a row without a break",
    ),
    AlertRule(
        alert_type=AlertType.PROLONGED_NAVIGATION,
        priority=3,
        condition=_prolonged_navigation,
        description="Navigating without completing or starting anything",
    ),
]
