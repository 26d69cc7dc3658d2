"""
Session Transition Watcher — opens and closes the session-complete dialogs.

Registered as a SessionCoordinator listener, it compares the previous and
current snapshots on every change:

    focus phase → completed (task kept)   open FocusSessionCompleteDialog
    break phase → break_ended             open BreakSessionCompleteDialog
    both timers idle, no task             close dialogs, drop cached task

Completion is an explicit phase, so a completed state that arrives without a
running frame before it (restored after a restart) still opens the dialog.

Listeners are synchronous. When the completed task is not in the repository
cache the dialog opens in a loading state and resolve_pending() does the
remote refresh.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..exceptions import TaskRepositoryError
from ..tasks.repository import TaskRepository
from ..timers.state import BreakPhase, FocusPhase
from .coordinator import SessionCoordinator, SessionMode, SessionSnapshot
from .dialogs import BreakSessionCompleteDialog, FocusSessionCompleteDialog

logger = logging.getLogger(__name__)


class Transition(str, Enum):
    NONE = "none"
    FOCUS_COMPLETED = "focus_completed"
    BREAK_COMPLETED = "break_completed"
    FULL_STOP = "full_stop"


class SessionTransitionWatcher:

    def __init__(
        self,
        tasks: TaskRepository,
        focus_dialog: FocusSessionCompleteDialog,
        break_dialog: BreakSessionCompleteDialog,
    ):
        self._tasks = tasks
        self.focus_dialog = focus_dialog
        self.break_dialog = break_dialog
        self._pending_task_id: Optional[str] = None

    def attach(self, coordinator: SessionCoordinator) -> None:
        coordinator.register_listener(self.observe)

    @property
    def has_pending(self) -> bool:
        return self._pending_task_id is not None

    # ------------------------------------------------------------------
    # Edge detection
    # ------------------------------------------------------------------

    def observe(self, prev: SessionSnapshot, current: SessionSnapshot) -> Transition:
        focus_now = current.focus
        if (
            focus_now.phase == FocusPhase.COMPLETED
            and focus_now.active_task_id is not None
            and (prev.focus.phase != FocusPhase.COMPLETED or not self.focus_dialog.is_open)
        ):
            self._open_focus_dialog(focus_now.active_task_id)
            return Transition.FOCUS_COMPLETED

        break_now = current.rest
        if (
            break_now.phase == BreakPhase.BREAK_ENDED
            and (prev.rest.phase != BreakPhase.BREAK_ENDED or not self.break_dialog.is_open)
        ):
            self.break_dialog.open(break_now.active_task_id)
            return Transition.BREAK_COMPLETED

        if current.mode == SessionMode.IDLE and current.active_task_id is None:
            if self.focus_dialog.is_open or self.break_dialog.is_open or self.has_pending:
                logger.debug("Session fully stopped; closing dialogs")
            self.focus_dialog.close()
            self.focus_dialog.discard_task()
            self.break_dialog.close()
            self._pending_task_id = None
            return Transition.FULL_STOP

        return Transition.NONE

    def _open_focus_dialog(self, task_id: str) -> None:
        task = self._tasks.get_task(task_id)
        if task is None:
            self._pending_task_id = task_id
            self.focus_dialog.open(task_id, task=None, loading=True)
        else:
            self._pending_task_id = None
            self.focus_dialog.open(task_id, task=task)

    # ------------------------------------------------------------------
    # Remote fallback
    # ------------------------------------------------------------------

    async def resolve_pending(self) -> None:
        """Refresh a task that was missing from the cache when its dialog opened.

        A failed refresh leaves the dialog without a task, which hides the
        finish-task action.
        """
        task_id = self._pending_task_id
        if task_id is None:
            return
        self._pending_task_id = None
        try:
            await self._tasks.refresh_task(task_id)
            task = self._tasks.get_task(task_id)
        except TaskRepositoryError:
            logger.warning(
                "Could not fetch completed task",
                extra={"context": {"task_id": task_id}},
                exc_info=True,
            )
            task = None
        if self.focus_dialog.is_open and self.focus_dialog.task_id == task_id:
            self.focus_dialog.set_task(task)
