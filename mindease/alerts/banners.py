"""
Alert banners — the non-blocking advisory surface.

AlertMonitor turns SignalStore state into at most one visible banner. A banner
stays up while its condition holds and disappears when the condition clears.
Dismissing a banner removes its type from the alert history and snoozes it for
ALERT_DISMISS_EXPIRY_MS so it does not reappear on the next evaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ..signals.state import AlertType
from ..signals.store import SignalStore
from .constants import ALERT_DISMISS_EXPIRY_MS
from .policy import AlertPolicy

logger = logging.getLogger(__name__)


@dataclass
class BannerView:
    visible: Optional[AlertType] = None
    flags: Dict[str, bool] = field(default_factory=dict)
    message: str = ""

    @classmethod
    def of(cls, visible: Optional[AlertType], message: str = "") -> "BannerView":
        return cls(
            visible=visible,
            flags={t.value: t == visible for t in AlertType},
            message=message,
        )


class AlertMonitor:
    """
    Usage:
        monitor = AlertMonitor(store, active_task=coordinator.focus_task_id,
                               focus_duration_minutes=lambda: 25)
        view = monitor.evaluate()
        monitor.dismiss(AlertType.MISSING_BREAK)
    """

    def __init__(
        self,
        signals: SignalStore,
        active_task: Callable[[], Optional[str]],
        focus_duration_minutes: Callable[[], int],
        policy: Optional[AlertPolicy] = None,
    ):
        self._signals = signals
        self._active_task = active_task
        self._focus_duration_minutes = focus_duration_minutes
        self._policy = policy or AlertPolicy()
        self._visible: Optional[AlertType] = None
        self._snoozed: Dict[AlertType, int] = {}      # type -> snooze expiry (ms)

    @property
    def visible(self) -> Optional[AlertType]:
        return self._visible

    def evaluate(self, now: Optional[int] = None) -> BannerView:
        now = self._signals.now() if now is None else now
        state = self._signals.state
        ctx = self._policy.context(
            state, now, self._active_task(), self._focus_duration_minutes()
        )
        holding = self._policy.conditions_met(ctx)

        if self._visible is not None and self._visible not in holding:
            logger.debug("Alert condition cleared", extra={"context": {"alert": self._visible.value}})
            self._visible = None

        if self._visible is None:
            candidate = self._policy.select(
                state,
                now,
                ctx.active_task_id,
                ctx.focus_duration_minutes,
                exclude=self._active_snoozes(now),
            )
            if candidate is not None:
                self._signals.show_alert(candidate)
                self._visible = candidate

        return self._view()

    def dismiss(self, alert_type: AlertType, now: Optional[int] = None) -> BannerView:
        now = self._signals.now() if now is None else now
        if self._visible == alert_type:
            self._visible = None
        self._signals.dismiss_alert(alert_type)
        self._snoozed[alert_type] = now + ALERT_DISMISS_EXPIRY_MS
        logger.info("Alert dismissed", extra={"context": {"alert": alert_type.value}})
        return self._view()

    def _view(self) -> BannerView:
        if self._visible is None:
            return BannerView.of(None)
        rule = self._policy.rule(self._visible)
        return BannerView.of(self._visible, rule.description if rule else "")

    def _active_snoozes(self, now: int):
        expired = [t for t, until in self._snoozed.items() if until <= now]
        for t in expired:
            del self._snoozed[t]
        return set(self._snoozed)
