"""
Signal State — the behavioral signals behind cognitive alerts.

SignalState is an immutable value. It only changes through the action types
below, applied by the pure reduce() function:

    state = reduce(state, StartTaskFocus("t1"), now=now_ms())

All timestamps are integer milliseconds since the epoch.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..alerts.constants import ALERT_HISTORY_RESET_MS


def now_ms() -> int:
    return int(time.time() * 1000)


class AlertType(str, Enum):
    EXCESSIVE_TIME = "excessive_time"
    MISSING_BREAK = "missing_break"
    PROLONGED_NAVIGATION = "prolonged_navigation"
    VISUAL_OVERLOAD = "visual_overload"      # stored only; no rule raises it


@dataclass(frozen=True)
class TaskFocusTime:
    start_time: int = 0      # nonzero while accumulating
    total_time: int = 0      # committed milliseconds

    @property
    def accumulating(self) -> bool:
        return self.start_time > 0


@dataclass(frozen=True)
class SignalState:
    alert_history: Tuple[AlertType, ...] = ()
    last_alert_time: Optional[int] = None
    consecutive_sessions: int = 0
    navigation_start_time: Optional[int] = None
    task_focus_times: Dict[str, TaskFocusTime] = field(default_factory=dict)
    last_user_action: Optional[int] = None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_history": [a.value for a in self.alert_history],
            "last_alert_time": self.last_alert_time,
            "consecutive_sessions": self.consecutive_sessions,
            "navigation_start_time": self.navigation_start_time,
            "task_focus_times": {
                task_id: {"start_time": t.start_time, "total_time": t.total_time}
                for task_id, t in self.task_focus_times.items()
            },
            "last_user_action": self.last_user_action,
        }

    @classmethod
    def from_dict(cls, data: Any, now: int) -> "SignalState":
        """Build a state from untrusted stored data, defaulting field by field.

        Applies the fresh-day rule: an alert history whose last alert is older
        than ALERT_HISTORY_RESET_MS is dropped.
        """
        if not isinstance(data, dict):
            return initial_state(now)

        history: list = []
        for raw in data.get("alert_history") or []:
            try:
                alert = AlertType(raw)
            except ValueError:
                continue
            if alert not in history:
                history.append(alert)

        focus_times: Dict[str, TaskFocusTime] = {}
        raw_times = data.get("task_focus_times")
        if isinstance(raw_times, dict):
            for task_id, entry in raw_times.items():
                if not isinstance(entry, dict):
                    continue
                start, total = entry.get("start_time"), entry.get("total_time")
                if _is_int(start) and _is_int(total):
                    focus_times[str(task_id)] = TaskFocusTime(int(start), int(total))

        last_alert_time = _int_or_none(data.get("last_alert_time"))
        if last_alert_time is not None and now - last_alert_time > ALERT_HISTORY_RESET_MS:
            history = []
            last_alert_time = None

        sessions = data.get("consecutive_sessions")
        last_action = _int_or_none(data.get("last_user_action"))

        return cls(
            alert_history=tuple(history),
            last_alert_time=last_alert_time,
            consecutive_sessions=int(sessions) if _is_int(sessions) and sessions >= 0 else 0,
            navigation_start_time=_int_or_none(data.get("navigation_start_time")),
            task_focus_times=focus_times,
            last_user_action=last_action if last_action is not None else now,
        )


def initial_state(now: int) -> SignalState:
    return SignalState(last_user_action=now)


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _int_or_none(value: Any) -> Optional[int]:
    return int(value) if _is_int(value) else None


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ShowAlert:
    alert_type: AlertType


@dataclass(frozen=True)
class DismissAlert:
    alert_type: AlertType


@dataclass(frozen=True)
class IncrementSessions:
    pass


@dataclass(frozen=True)
class ResetSessions:
    pass


@dataclass(frozen=True)
class StartNavigation:
    pass


@dataclass(frozen=True)
class StopNavigation:
    pass


@dataclass(frozen=True)
class StartTaskFocus:
    task_id: str


@dataclass(frozen=True)
class StopTaskFocus:
    task_id: str
    at: Optional[int] = None      # end of the focus period (ms); defaults to now


@dataclass(frozen=True)
class UpdateUserAction:
    pass


@dataclass(frozen=True)
class ResetSession:
    pass


SignalAction = Union[
    ShowAlert,
    DismissAlert,
    IncrementSessions,
    ResetSessions,
    StartNavigation,
    StopNavigation,
    StartTaskFocus,
    StopTaskFocus,
    UpdateUserAction,
    ResetSession,
]


# ---------------------------------------------------------------------------
# Transition function
# ---------------------------------------------------------------------------

def reduce(state: SignalState, action: SignalAction, now: int) -> SignalState:
    """Return the state that results from applying *action* at time *now*."""
    if isinstance(action, ShowAlert):
        history = state.alert_history
        if action.alert_type not in history:
            history = history + (action.alert_type,)
        return replace(state, alert_history=history, last_alert_time=now)

    if isinstance(action, DismissAlert):
        return replace(
            state,
            alert_history=tuple(a for a in state.alert_history if a != action.alert_type),
        )

    if isinstance(action, IncrementSessions):
        return replace(state, consecutive_sessions=state.consecutive_sessions + 1)

    if isinstance(action, ResetSessions):
        return replace(state, consecutive_sessions=0)

    if isinstance(action, StartNavigation):
        if state.navigation_start_time is not None:
            return state
        return replace(state, navigation_start_time=now)

    if isinstance(action, StopNavigation):
        return replace(state, navigation_start_time=None)

    if isinstance(action, StartTaskFocus):
        current = state.task_focus_times.get(action.task_id, TaskFocusTime())
        if current.accumulating:
            return state
        times = dict(state.task_focus_times)
        times[action.task_id] = TaskFocusTime(start_time=now, total_time=current.total_time)
        return replace(state, task_focus_times=times)

    if isinstance(action, StopTaskFocus):
        current = state.task_focus_times.get(action.task_id)
        if current is None or not current.accumulating:
            return state
        end = now if action.at is None else min(now, action.at)
        elapsed = max(0, end - current.start_time)
        times = dict(state.task_focus_times)
        times[action.task_id] = TaskFocusTime(start_time=0, total_time=current.total_time + elapsed)
        return replace(state, task_focus_times=times)

    if isinstance(action, UpdateUserAction):
        return replace(state, last_user_action=now, navigation_start_time=None)

    if isinstance(action, ResetSession):
        return replace(state, alert_history=(), last_alert_time=None)

    raise TypeError(f"Unknown signal action: {action!r}")
