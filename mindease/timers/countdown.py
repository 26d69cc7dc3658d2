"""
Countdown driver — the asyncio task that ticks the session once per interval.

The loop runs only while should_run() is true. sync() is called after every
session change: it starts the loop when a timer begins running and cancels it
when the timers stop. When the tick itself ends the session (a timer reached
zero) the loop simply exits on its next check.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Union[None, Awaitable[None]]]


class Countdown:

    def __init__(
        self,
        on_tick: TickCallback,
        should_run: Callable[[], bool],
        interval_ms: int = 1000,
    ):
        self._on_tick = on_tick
        self._should_run = should_run
        self._interval_s = interval_ms / 1000.0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sync(self) -> None:
        """Start or cancel the loop to match should_run()."""
        if self._should_run():
            self.start()
        else:
            self.cancel()

    def start(self) -> None:
        if self.running:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no event loop (plain sync caller); ticks are driven manually
            return
        self._task = loop.create_task(self._run())

    def cancel(self) -> None:
        if not self.running:
            return
        if asyncio.current_task() is self._task:
            return      # ending from inside a tick; the loop exits on its own
        self._task.cancel()
        # forget it now so a start() in the same turn spawns a fresh loop
        self._task = None

    async def stop(self) -> None:
        """Cancel and wait for the loop to finish (application shutdown)."""
        task = self._task
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while self._should_run():
            await asyncio.sleep(self._interval_s)
            if not self._should_run():
                break
            try:
                result = self._on_tick()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Countdown tick failed")
