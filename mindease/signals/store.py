"""
Signal Store — owns the live SignalState for a browsing session.

Every named action dispatches through signals.state.reduce() and the result is
written to the session storage port straight away. Storage problems never
propagate: a failed read starts from defaults, a failed write is logged and the
in-memory state stays authoritative.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, List, Optional

from ..alerts import policy
from ..exceptions import StorageError
from .state import (
    AlertType,
    DismissAlert,
    IncrementSessions,
    ResetSession,
    ResetSessions,
    ShowAlert,
    SignalAction,
    SignalState,
    StartNavigation,
    StartTaskFocus,
    StopNavigation,
    StopTaskFocus,
    UpdateUserAction,
    initial_state,
    now_ms,
    reduce,
)
from .storage import SessionStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "mindease_cognitive_alerts_state"


def load_state(storage: SessionStorage, now: int, key: str = STORAGE_KEY) -> SignalState:
    try:
        raw = storage.get_item(key)
    except StorageError:
        logger.warning("Could not read signal state, starting fresh", exc_info=True)
        return initial_state(now)
    if not raw:
        return initial_state(now)
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Stored signal state is not valid JSON, starting fresh")
        return initial_state(now)
    return SignalState.from_dict(data, now)


class SignalStore:
    """
    Usage:
        store = SignalStore(FileSessionStorage(path))
        store.start_task_focus("t1")
        store.get_task_focus_time("t1")
    """

    def __init__(
        self,
        storage: SessionStorage,
        key: str = STORAGE_KEY,
        clock: Callable[[], int] = now_ms,
    ):
        self._storage = storage
        self._key = key
        self._clock = clock
        self._state = load_state(storage, clock(), key)
        self._listeners: List[Callable[[SignalState, SignalAction], None]] = []

    @property
    def state(self) -> SignalState:
        return self._state

    def now(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Dispatch + persistence
    # ------------------------------------------------------------------

    def dispatch(self, action: SignalAction) -> SignalState:
        new_state = reduce(self._state, action, self._clock())
        if new_state is self._state:
            return new_state
        self._state = new_state
        self._persist()
        for listener in self._listeners:
            listener(new_state, action)
        return new_state

    def _persist(self) -> None:
        try:
            self._storage.set_item(self._key, json.dumps(self._state.to_dict()))
        except StorageError:
            logger.error("Could not persist signal state", exc_info=True)

    def register_listener(self, fn: Callable[[SignalState, SignalAction], None]) -> None:
        """Register a callback(state, action) called after every change."""
        self._listeners.append(fn)

    # ------------------------------------------------------------------
    # Named actions
    # ------------------------------------------------------------------

    def show_alert(self, alert_type: AlertType) -> SignalState:
        logger.info("Alert shown", extra={"context": {"alert": alert_type.value}})
        return self.dispatch(ShowAlert(alert_type))

    def dismiss_alert(self, alert_type: AlertType) -> SignalState:
        return self.dispatch(DismissAlert(alert_type))

    def increment_sessions(self) -> SignalState:
        return self.dispatch(IncrementSessions())

    def reset_sessions(self) -> SignalState:
        return self.dispatch(ResetSessions())

    def start_navigation(self) -> SignalState:
        return self.dispatch(StartNavigation())

    def stop_navigation(self) -> SignalState:
        return self.dispatch(StopNavigation())

    def start_task_focus(self, task_id: str) -> SignalState:
        return self.dispatch(StartTaskFocus(task_id))

    def stop_task_focus(self, task_id: str, at: Optional[int] = None) -> SignalState:
        return self.dispatch(StopTaskFocus(task_id, at))

    def update_user_action(self) -> SignalState:
        return self.dispatch(UpdateUserAction())

    def reset_session(self) -> SignalState:
        return self.dispatch(ResetSession())

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    def should_show_alert(self, alert_type: AlertType, now: Optional[int] = None) -> bool:
        return policy.should_show_alert(self._state, alert_type, self._clock() if now is None else now)

    def get_task_focus_time(self, task_id: str, now: Optional[int] = None) -> int:
        return policy.get_task_focus_time(self._state, task_id, self._clock() if now is None else now)

    def get_navigation_time(self, now: Optional[int] = None) -> int:
        return policy.get_navigation_time(self._state, self._clock() if now is None else now)
