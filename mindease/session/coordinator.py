"""
Session Coordinator — owns the focus and break timers as one unit.

The coordinator is the only thing that starts timers, so the "never both
running" rule is structural: starting one timer always stops the other first.
Every change is mirrored into the SignalStore (per-task focus accumulation),
persisted to session storage, and announced to listeners as a
(previous, current) SessionSnapshot pair.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..exceptions import StorageError, TaskRepositoryError, TimerStateError
from ..signals.storage import SessionStorage
from ..signals.store import SignalStore
from ..tasks.models import TaskStatus
from ..tasks.repository import TaskRepository
from ..timers.state import TimerState
from ..timers.timer import BreakTimer, FocusTimer

logger = logging.getLogger(__name__)

TIMERS_STORAGE_KEY = "mindease_session_timers"


class SessionMode(str, Enum):
    IDLE = "idle"
    FOCUSING = "focusing"
    BREAKING = "breaking"


@dataclass(frozen=True)
class SessionSnapshot:
    focus: TimerState
    rest: TimerState

    @property
    def mode(self) -> SessionMode:
        if not self.rest.is_idle:
            return SessionMode.BREAKING
        if not self.focus.is_idle:
            return SessionMode.FOCUSING
        return SessionMode.IDLE

    @property
    def active_task_id(self) -> Optional[str]:
        if self.mode == SessionMode.BREAKING:
            return self.rest.active_task_id
        if self.mode == SessionMode.FOCUSING:
            return self.focus.active_task_id
        return None

    @property
    def any_running(self) -> bool:
        return self.focus.is_running or self.rest.is_running


Listener = Callable[[SessionSnapshot, SessionSnapshot], None]


class SessionCoordinator:

    def __init__(
        self,
        signals: SignalStore,
        focus_timer: FocusTimer,
        break_timer: BreakTimer,
        storage: Optional[SessionStorage] = None,
        tasks: Optional[TaskRepository] = None,
    ):
        self._signals = signals
        self._focus = focus_timer
        self._break = break_timer
        self._storage = storage
        self._tasks = tasks
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(focus=self._focus.state, rest=self._break.state)

    def focus_task_id(self) -> Optional[str]:
        """Task currently in focus (running, paused or just completed)."""
        state = self._focus.state
        return None if state.is_idle else state.active_task_id

    def register_listener(self, fn: Listener) -> None:
        """Register a callback(previous, current) called after every change."""
        self._listeners.append(fn)

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def start_focus(self, task_id: str) -> SessionSnapshot:
        prev = self.snapshot()
        self._break.stop()
        previous_task = self.focus_task_id()
        if previous_task is not None and previous_task != task_id:
            self._signals.stop_task_focus(previous_task)
        self._focus.start(task_id)
        self._signals.start_task_focus(task_id)
        return self._changed(prev)

    def pause_focus(self) -> SessionSnapshot:
        prev = self.snapshot()
        state = self._focus.pause()
        self._signals.stop_task_focus(state.active_task_id)
        return self._changed(prev)

    def resume_focus(self) -> SessionSnapshot:
        prev = self.snapshot()
        state = self._focus.resume()
        self._signals.start_task_focus(state.active_task_id)
        return self._changed(prev)

    def stop_focus(self) -> SessionSnapshot:
        prev = self.snapshot()
        self._end_focus_tracking()
        self._focus.stop()
        return self._changed(prev)

    # ------------------------------------------------------------------
    # Break
    # ------------------------------------------------------------------

    def start_break(self, task_id: Optional[str]) -> SessionSnapshot:
        prev = self.snapshot()
        self._end_focus_tracking()
        self._focus.stop()
        self._break.start(task_id)
        return self._changed(prev)

    def stop_break(self) -> SessionSnapshot:
        prev = self.snapshot()
        self._break.stop()
        return self._changed(prev)

    def stop_all(self) -> SessionSnapshot:
        prev = self.snapshot()
        self._end_focus_tracking()
        self._focus.stop()
        self._break.stop()
        return self._changed(prev)

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------

    def tick(self) -> SessionSnapshot:
        """Advance whichever timer is running by one second."""
        prev = self.snapshot()
        if self._focus.state.is_running:
            state = self._focus.tick()
            if not state.is_running:
                self._signals.stop_task_focus(state.active_task_id)
        elif self._break.state.is_running:
            self._break.tick()
        current = self.snapshot()
        if current.focus.phase != prev.focus.phase or current.rest.phase != prev.rest.phase:
            return self._changed(prev)
        return current

    # ------------------------------------------------------------------
    # Task board entry point
    # ------------------------------------------------------------------

    async def begin_task(self, task_id: str) -> SessionSnapshot:
        """Start focusing on a task from the board.

        Counts as a user action and moves a to-do task to in-progress. The
        status update is best effort.
        """
        snapshot = self.start_focus(task_id)
        self._signals.update_user_action()
        if self._tasks is None:
            return snapshot
        task = self._tasks.get_task(task_id)
        if task is None or task.status == TaskStatus.TODO:
            try:
                await self._tasks.update_task_status(task_id, TaskStatus.IN_PROGRESS)
            except TaskRepositoryError:
                logger.warning(
                    "Could not mark task in progress",
                    extra={"context": {"task_id": task_id}},
                    exc_info=True,
                )
        return snapshot

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def restore(self) -> SessionSnapshot:
        """Load timers from session storage, catching up on elapsed time."""
        prev = self.snapshot()
        data = None
        if self._storage is not None:
            try:
                raw = self._storage.get_item(TIMERS_STORAGE_KEY)
                data = json.loads(raw) if raw else None
            except (StorageError, ValueError):
                logger.warning("Could not read timer state, starting idle", exc_info=True)
        if not isinstance(data, dict):
            data = {}

        focus_ended_at = _saved_end_ms(data.get("focus"))
        self._focus.restore(data.get("focus"))
        self._break.restore(data.get("break"))
        focus = self._focus.state
        if not focus.is_idle and not self._break.state.is_idle:
            logger.warning("Restored both timers active; dropping focus timer")
            self._focus.stop()
        if focus.active_task_id is not None and not self._focus.state.is_running:
            # a session that ran out while away stops accumulating at its end time
            self._signals.stop_task_focus(focus.active_task_id, at=focus_ended_at)
        return self._changed(prev)

    def _persist(self) -> None:
        if self._storage is None:
            return
        payload = {"focus": self._focus.snapshot(), "break": self._break.snapshot()}
        try:
            self._storage.set_item(TIMERS_STORAGE_KEY, json.dumps(payload))
        except StorageError:
            logger.error("Could not persist timer state", exc_info=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _end_focus_tracking(self) -> None:
        task_id = self.focus_task_id()
        if task_id is not None:
            self._signals.stop_task_focus(task_id)

    def _changed(self, prev: SessionSnapshot) -> SessionSnapshot:
        current = self.snapshot()
        if current.focus.is_running and current.rest.is_running:
            raise TimerStateError("Focus and break timers are both running")
        self._persist()
        if current != prev:
            for listener in self._listeners:
                listener(prev, current)
        return current


def _saved_end_ms(data) -> Optional[int]:
    """End time (ms) of a snapshot saved while running, else None."""
    try:
        return int(float(data["ends_at"]) * 1000)
    except (KeyError, TypeError, ValueError):
        return None
