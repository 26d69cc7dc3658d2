"""
Alert Policy — pure decision functions over SignalState.

Module-level functions answer the elemental questions (may this alert type be
shown now? how long has a task been in focus?). AlertPolicy combines them with
the rule registry to pick the single alert to surface.
"""

from __future__ import annotations

from typing import Collection, List, Optional

from ..signals.state import AlertType, SignalState
from .constants import DEFAULT_FOCUS_DURATION_MINUTES, MIN_ALERT_INTERVAL_MS
from .rules import RULES, AlertContext, AlertRule


def should_show_alert(state: SignalState, alert_type: AlertType, now: int) -> bool:
    """Rate limit across all alerts, then dedup within the session."""
    if state.last_alert_time is not None and now - state.last_alert_time < MIN_ALERT_INTERVAL_MS:
        return False
    if alert_type in state.alert_history:
        return False
    return True


def get_task_focus_time(state: SignalState, task_id: str, now: int) -> int:
    data = state.task_focus_times.get(task_id)
    if data is None:
        return 0
    if data.accumulating:
        return data.total_time + max(0, now - data.start_time)
    return data.total_time


def get_navigation_time(state: SignalState, now: int) -> int:
    if state.navigation_start_time is None:
        return 0
    return max(0, now - state.navigation_start_time)


class AlertPolicy:
    """
    Evaluates the rule registry against the current signals and returns
    alert types ordered by priority.
    """

    def __init__(self, rules: Optional[List[AlertRule]] = None):
        self._rules = sorted(rules if rules is not None else RULES, key=lambda r: r.priority)

    def context(
        self,
        state: SignalState,
        now: int,
        active_task_id: Optional[str] = None,
        focus_duration_minutes: int = DEFAULT_FOCUS_DURATION_MINUTES,
    ) -> AlertContext:
        return AlertContext(
            active_task_id=active_task_id,
            active_task_focus_ms=(
                get_task_focus_time(state, active_task_id, now) if active_task_id else 0
            ),
            consecutive_sessions=state.consecutive_sessions,
            navigation_ms=get_navigation_time(state, now),
            focus_duration_minutes=focus_duration_minutes,
        )

    def conditions_met(self, ctx: AlertContext) -> List[AlertType]:
        """All alert types whose condition holds, highest priority first."""
        return [rule.alert_type for rule in self._rules if rule.condition(ctx)]

    def eligible(
        self,
        state: SignalState,
        now: int,
        active_task_id: Optional[str] = None,
        focus_duration_minutes: int = DEFAULT_FOCUS_DURATION_MINUTES,
        exclude: Collection[AlertType] = (),
    ) -> List[AlertType]:
        """Alert types whose condition holds and which suppression permits."""
        ctx = self.context(state, now, active_task_id, focus_duration_minutes)
        return [
            alert_type
            for alert_type in self.conditions_met(ctx)
            if alert_type not in exclude and should_show_alert(state, alert_type, now)
        ]

    def select(
        self,
        state: SignalState,
        now: int,
        active_task_id: Optional[str] = None,
        focus_duration_minutes: int = DEFAULT_FOCUS_DURATION_MINUTES,
        exclude: Collection[AlertType] = (),
    ) -> Optional[AlertType]:
        """The single alert to surface now, or None."""
        eligible = self.eligible(state, now, active_task_id, focus_duration_minutes, exclude)
        return eligible[0] if eligible else None

    def rule(self, alert_type: AlertType) -> Optional[AlertRule]:
        return next((r for r in self._rules if r.alert_type == alert_type), None)
