"""
Timer state values shared by the focus and break timers.

A timer is a small state machine over an immutable TimerState. Completion is
an explicit phase (COMPLETED / BREAK_ENDED) that keeps the task id, so the
session watcher never has to infer "just finished" from two snapshots.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type, Union


class FocusPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class BreakPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    BREAK_ENDED = "break_ended"


Phase = Union[FocusPhase, BreakPhase]


@dataclass(frozen=True)
class TimerState:
    phase: Phase
    active_task_id: Optional[str] = None
    remaining_seconds: int = 0
    duration_seconds: int = 0
    ends_at: Optional[float] = None      # wall clock, only while running

    @property
    def is_running(self) -> bool:
        return self.phase.value == "running"

    @property
    def is_idle(self) -> bool:
        return self.phase.value == "idle"

    def elapsed_seconds(self) -> int:
        return max(0, self.duration_seconds - self.remaining_seconds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "active_task_id": self.active_task_id,
            "remaining_seconds": self.remaining_seconds,
            "duration_seconds": self.duration_seconds,
            "ends_at": self.ends_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], phase_type: Type[Phase]) -> "TimerState":
        ends_at = data.get("ends_at")
        task_id = data.get("active_task_id")
        return cls(
            phase=phase_type(data["phase"]),
            active_task_id=str(task_id) if task_id is not None else None,
            remaining_seconds=int(data.get("remaining_seconds", 0)),
            duration_seconds=int(data.get("duration_seconds", 0)),
            ends_at=float(ends_at) if ends_at is not None else None,
        )


def is_timer_completed(remaining_seconds: float) -> bool:
    return remaining_seconds <= 0


def remaining_until(ends_at: float, now: Optional[float] = None) -> int:
    """Whole seconds left until *ends_at*, never negative."""
    now = time.time() if now is None else now
    return max(0, int(round(ends_at - now)))


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS; minutes are not wrapped at 60."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"
