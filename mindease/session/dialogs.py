"""
Session-complete dialogs — the forced decision shown when a timer hits zero.

Both dialogs are modal and cannot be dismissed without picking an action
(prevent_close). Each action drives the SessionCoordinator and the
SignalStore, then closes the dialog. Task status writes are best effort: a
failure is logged and the rest of the action still runs.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..exceptions import DialogActionError, TaskRepositoryError
from ..signals.store import SignalStore
from ..tasks.models import Task, TaskStatus
from ..tasks.repository import TaskRepository
from .coordinator import SessionCoordinator

logger = logging.getLogger(__name__)


class FocusAction(str, Enum):
    START_BREAK = "start_break"
    CONTINUE_FOCUS = "continue_focus"
    FINISH_TASK = "finish_task"


class BreakAction(str, Enum):
    START_FOCUS = "start_focus"
    END_FOCUS = "end_focus"


class _SessionCompleteDialog(ABC):
    kind = "session"
    prevent_close = True

    def __init__(
        self,
        coordinator: SessionCoordinator,
        signals: SignalStore,
        tasks: TaskRepository,
    ):
        self._coordinator = coordinator
        self._signals = signals
        self._tasks = tasks
        self.is_open = False
        self.task_id: Optional[str] = None
        self._busy = False

    def open(self, task_id: Optional[str]) -> None:
        self.is_open = True
        self.task_id = task_id
        logger.info("%s dialog opened", self.kind.capitalize(), extra={"context": {"task_id": task_id}})

    def close(self) -> None:
        self.is_open = False

    def request_close(self) -> bool:
        """Outside click / escape. Refused while prevent_close is set."""
        if self.prevent_close:
            return False
        self.close()
        return True

    @abstractmethod
    def available_actions(self) -> List[Enum]:
        """Actions offered while the dialog is open."""

    @abstractmethod
    def _handler(self, action: Enum) -> Callable[[Optional[str]], Awaitable[None]]:
        ...

    async def perform(self, action: Enum) -> None:
        if not self.is_open:
            raise DialogActionError(f"{self.kind} dialog is not open")
        if self._busy:
            raise DialogActionError(f"{self.kind} dialog is already handling an action")
        if action not in self.available_actions():
            raise DialogActionError(f"Action {action.value!r} is not offered")

        task_id = self.task_id
        logger.info(
            "%s dialog action", self.kind.capitalize(),
            extra={"context": {"action": action.value, "task_id": task_id}},
        )
        self._busy = True
        try:
            await self._handler(action)(task_id)
        finally:
            self._busy = False
            self.close()

    async def _set_status(self, task_id: Optional[str], status: TaskStatus) -> None:
        if task_id is None:
            return
        try:
            await self._tasks.update_task_status(task_id, status)
        except TaskRepositoryError:
            logger.error(
                "Task status update failed; continuing",
                extra={"context": {"task_id": task_id, "status": status.name}},
                exc_info=True,
            )

    def view(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "is_open": self.is_open,
            "task_id": self.task_id,
            "prevent_close": self.prevent_close,
            "actions": [a.value for a in self.available_actions()] if self.is_open else [],
        }


class FocusSessionCompleteDialog(_SessionCompleteDialog):
    """Shown when a focus session reaches zero."""

    kind = "focus"

    def __init__(self, coordinator, signals, tasks):
        super().__init__(coordinator, signals, tasks)
        self.task: Optional[Task] = None
        self.loading = False

    def open(self, task_id: Optional[str], task: Optional[Task] = None, loading: bool = False) -> None:
        super().open(task_id)
        self.task = task
        self.loading = loading

    def set_task(self, task: Optional[Task]) -> None:
        self.task = task
        self.loading = False

    def close(self) -> None:
        super().close()
        self.loading = False

    def discard_task(self) -> None:
        self.task = None
        self.loading = False

    def can_finish_task(self) -> bool:
        return self.task is not None and not self.task.has_incomplete_subtasks()

    def available_actions(self) -> List[Enum]:
        actions: List[Enum] = [FocusAction.START_BREAK, FocusAction.CONTINUE_FOCUS]
        if self.can_finish_task():
            actions.append(FocusAction.FINISH_TASK)
        return actions

    def _handler(self, action: Enum):
        return {
            FocusAction.START_BREAK: self._start_break,
            FocusAction.CONTINUE_FOCUS: self._continue_focus,
            FocusAction.FINISH_TASK: self._finish_task,
        }[action]

    async def _start_break(self, task_id: Optional[str]) -> None:
        self._coordinator.start_break(task_id)

    async def _continue_focus(self, task_id: Optional[str]) -> None:
        if task_id is not None:
            self._coordinator.start_focus(task_id)
        self._signals.increment_sessions()
        self._signals.update_user_action()

    async def _finish_task(self, task_id: Optional[str]) -> None:
        await self._set_status(task_id, TaskStatus.DONE)
        self._coordinator.stop_focus()
        self._signals.reset_sessions()

    def view(self) -> Dict[str, Any]:
        data = super().view()
        data["loading"] = self.loading
        data["task"] = self.task.to_dict() if self.task is not None else None
        return data


class BreakSessionCompleteDialog(_SessionCompleteDialog):
    """Shown when a break reaches zero."""

    kind = "break"

    def available_actions(self) -> List[Enum]:
        return [BreakAction.START_FOCUS, BreakAction.END_FOCUS]

    def _handler(self, action: Enum):
        return {
            BreakAction.START_FOCUS: self._start_focus,
            BreakAction.END_FOCUS: self._end_focus,
        }[action]

    async def _start_focus(self, task_id: Optional[str]) -> None:
        if task_id is not None:
            self._coordinator.start_focus(task_id)
        else:
            self._coordinator.stop_break()
        # the break was honored
        self._signals.reset_sessions()

    async def _end_focus(self, task_id: Optional[str]) -> None:
        await self._set_status(task_id, TaskStatus.TODO)
        self._coordinator.stop_all()
        self._signals.reset_sessions()
