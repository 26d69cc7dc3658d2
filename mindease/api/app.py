"""
FastAPI application — local MindEase focus engine API.
Runs on http://127.0.0.1:8765 by default.

All services (signal store, timers, dialogs, alert monitor) live on app.state
so that each call to create_app() produces a fully independent instance with
no shared module-level globals.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..alerts.banners import AlertMonitor
from ..config import config
from ..exceptions import DialogActionError, TimerStateError
from ..session.coordinator import SessionCoordinator
from ..session.dialogs import BreakSessionCompleteDialog, FocusSessionCompleteDialog
from ..session.watcher import SessionTransitionWatcher
from ..settings import focus_duration_seconds, get_settings, short_break_duration_seconds
from ..signals.storage import FileSessionStorage, SessionStorage
from ..signals.store import SignalStore
from ..tasks.repository import (
    DocumentStoreTaskRepository,
    InMemoryTaskRepository,
    TaskRepository,
)
from ..timers.countdown import Countdown
from ..timers.timer import BreakTimer, FocusTimer

logger = logging.getLogger(__name__)


def create_app(
    storage: Optional[SessionStorage] = None,
    tasks: Optional[TaskRepository] = None,
) -> FastAPI:
    """
    storage  session-scoped key-value store (default: JSON file in data_dir)
    tasks    task repository (default: document store if configured, else in-memory)
    """

    # -----------------------------------------------------------------------
    # Lifespan: builds and tears down all per-app state
    # -----------------------------------------------------------------------

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session_storage = storage or FileSessionStorage(config.session_store_path)

        http_client: Optional[httpx.AsyncClient] = None
        repository = tasks
        if repository is None and config.task_store_url:
            http_client = httpx.AsyncClient(
                base_url=config.task_store_url,
                timeout=config.task_store_timeout_s,
            )
            repository = DocumentStoreTaskRepository(http_client, config.task_store_user)
        elif repository is None:
            repository = InMemoryTaskRepository()

        signals = SignalStore(session_storage)
        coordinator = SessionCoordinator(
            signals,
            FocusTimer(focus_duration_seconds),
            BreakTimer(short_break_duration_seconds),
            storage=session_storage,
            tasks=repository,
        )
        focus_dialog = FocusSessionCompleteDialog(coordinator, signals, repository)
        break_dialog = BreakSessionCompleteDialog(coordinator, signals, repository)
        watcher = SessionTransitionWatcher(repository, focus_dialog, break_dialog)
        watcher.attach(coordinator)
        monitor = AlertMonitor(
            signals,
            active_task=coordinator.focus_task_id,
            focus_duration_minutes=lambda: get_settings()["focus_duration_minutes"],
        )

        async def _on_tick():
            coordinator.tick()
            await watcher.resolve_pending()

        countdown = Countdown(
            on_tick=_on_tick,
            should_run=lambda: coordinator.snapshot().any_running,
            interval_ms=config.countdown_interval_ms,
        )
        coordinator.register_listener(lambda prev, current: countdown.sync())

        app.state.services = {
            "signals": signals,
            "tasks": repository,
            "coordinator": coordinator,
            "focus_dialog": focus_dialog,
            "break_dialog": break_dialog,
            "watcher": watcher,
            "monitor": monitor,
            "countdown": countdown,
        }

        coordinator.restore()
        await watcher.resolve_pending()
        countdown.sync()
        logger.info("Focus engine ready", extra={"context": {"mode": coordinator.snapshot().mode.value}})

        yield

        await countdown.stop()
        if http_client is not None:
            await http_client.aclose()

    # -----------------------------------------------------------------------
    # App
    # -----------------------------------------------------------------------

    app = FastAPI(
        title="MindEase Focus Engine",
        description="Focus/break session coordinator and cognitive alert engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TimerStateError)
    @app.exception_handler(DialogActionError)
    async def _conflict(request: Request, exc: Exception):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    from .routers import alerts, dialogs, settings, signals, tasks as task_routes, timers

    app.include_router(timers.router)
    app.include_router(dialogs.router)
    app.include_router(alerts.router)
    app.include_router(signals.router)
    app.include_router(task_routes.router)
    app.include_router(settings.router)

    @app.get("/health")
    def health(request: Request):
        services = getattr(request.app.state, "services", None)
        mode = services["coordinator"].snapshot().mode.value if services else "unknown"
        return {"status": "ok", "version": "0.1.0", "mode": mode}

    return app


app = create_app()
