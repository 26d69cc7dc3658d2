"""
Focus and break countdown timers.

Both count down once per tick() while running and keep the task id when they
reach zero. Only the focus timer can be paused; break sessions run to the end
or are stopped outright.

The timers do not know about each other. SessionCoordinator owns one of each
and is what keeps them from running at the same time.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Type

from ..exceptions import TimerStateError
from .state import (
    BreakPhase,
    FocusPhase,
    Phase,
    TimerState,
    is_timer_completed,
    remaining_until,
)

logger = logging.getLogger(__name__)


class _CountdownTimer:
    phases: Type[Phase]
    completed_phase: Phase
    name = "timer"

    def __init__(self, duration_fn: Callable[[], int], clock: Callable[[], float] = time.time):
        self._duration_fn = duration_fn
        self._clock = clock
        self.state = self._idle_state()

    def _idle_state(self) -> TimerState:
        duration = self._duration_fn()
        return TimerState(
            phase=self.phases("idle"),
            remaining_seconds=duration,
            duration_seconds=duration,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, task_id: str) -> TimerState:
        duration = self._duration_fn()
        self.state = TimerState(
            phase=self.phases("running"),
            active_task_id=task_id,
            remaining_seconds=duration,
            duration_seconds=duration,
            ends_at=self._clock() + duration,
        )
        logger.info(
            "%s started", self.name.capitalize(),
            extra={"context": {"task_id": task_id, "duration_s": duration}},
        )
        return self.state

    def stop(self) -> TimerState:
        if not self.state.is_idle:
            logger.info(
                "%s stopped", self.name.capitalize(),
                extra={"context": {"task_id": self.state.active_task_id}},
            )
        self.state = self._idle_state()
        return self.state

    def tick(self) -> TimerState:
        """Advance one second; no-op unless running."""
        if not self.state.is_running:
            return self.state
        remaining = self.state.remaining_seconds - 1
        if is_timer_completed(remaining):
            self.state = TimerState(
                phase=self.completed_phase,
                active_task_id=self.state.active_task_id,
                remaining_seconds=0,
                duration_seconds=self.state.duration_seconds,
            )
            logger.info(
                "%s completed", self.name.capitalize(),
                extra={"context": {"task_id": self.state.active_task_id}},
            )
        else:
            self.state = TimerState(
                phase=self.state.phase,
                active_task_id=self.state.active_task_id,
                remaining_seconds=remaining,
                duration_seconds=self.state.duration_seconds,
                ends_at=self.state.ends_at,
            )
        return self.state

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return self.state.to_dict()

    def restore(self, data: Optional[Dict[str, Any]]) -> TimerState:
        """Restore a snapshot, catching up on time that passed while away.

        A running timer whose end time has passed comes back completed; an
        unreadable snapshot comes back idle.
        """
        if not data:
            self.state = self._idle_state()
            return self.state
        try:
            saved = TimerState.from_dict(data, self.phases)
        except (KeyError, ValueError, TypeError):
            logger.warning("Discarding unreadable %s snapshot", self.name)
            self.state = self._idle_state()
            return self.state

        if saved.is_idle:
            self.state = self._idle_state()
        elif saved.is_running and saved.ends_at is not None:
            remaining = remaining_until(saved.ends_at, self._clock())
            if is_timer_completed(remaining):
                self.state = TimerState(
                    phase=self.completed_phase,
                    active_task_id=saved.active_task_id,
                    remaining_seconds=0,
                    duration_seconds=saved.duration_seconds,
                )
            else:
                self.state = TimerState(
                    phase=saved.phase,
                    active_task_id=saved.active_task_id,
                    remaining_seconds=remaining,
                    duration_seconds=saved.duration_seconds,
                    ends_at=saved.ends_at,
                )
        else:
            self.state = saved
        return self.state


class FocusTimer(_CountdownTimer):
    """idle → running ⇄ paused, running → completed, any → idle on stop()."""

    phases = FocusPhase
    completed_phase = FocusPhase.COMPLETED
    name = "focus timer"

    def pause(self) -> TimerState:
        if self.state.phase != FocusPhase.RUNNING:
            raise TimerStateError(f"Cannot pause focus timer in phase {self.state.phase.value!r}")
        self.state = TimerState(
            phase=FocusPhase.PAUSED,
            active_task_id=self.state.active_task_id,
            remaining_seconds=self.state.remaining_seconds,
            duration_seconds=self.state.duration_seconds,
        )
        return self.state

    def resume(self) -> TimerState:
        if self.state.phase != FocusPhase.PAUSED:
            raise TimerStateError(f"Cannot resume focus timer in phase {self.state.phase.value!r}")
        self.state = TimerState(
            phase=FocusPhase.RUNNING,
            active_task_id=self.state.active_task_id,
            remaining_seconds=self.state.remaining_seconds,
            duration_seconds=self.state.duration_seconds,
            ends_at=self._clock() + self.state.remaining_seconds,
        )
        return self.state


class BreakTimer(_CountdownTimer):
    """idle → running → break_ended → idle. Not pausable."""

    phases = BreakPhase
    completed_phase = BreakPhase.BREAK_ENDED
    name = "break timer"
