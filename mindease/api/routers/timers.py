"""
/timers — focus and break session control + WebSocket stream.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect

from ...api.schemas import SessionOut, StartBreakRequest, StartFocusRequest, TimerStateOut
from ...session.coordinator import SessionSnapshot
from ...timers.state import TimerState, format_time

router = APIRouter(prefix="/timers", tags=["timers"])


def _get_services(request: Request):
    return request.app.state.services


def _timer_out(state: TimerState) -> TimerStateOut:
    return TimerStateOut(
        phase=state.phase.value,
        active_task_id=state.active_task_id,
        remaining_seconds=state.remaining_seconds,
        duration_seconds=state.duration_seconds,
        elapsed_seconds=state.elapsed_seconds(),
        display=format_time(state.remaining_seconds),
    )


def _session_out(snapshot: SessionSnapshot) -> SessionOut:
    return SessionOut(
        mode=snapshot.mode.value,
        active_task_id=snapshot.active_task_id,
        focus=_timer_out(snapshot.focus),
        rest=_timer_out(snapshot.rest),
    )


@router.get("", response_model=SessionOut)
async def get_session(services=Depends(_get_services)):
    """Return both timers and the derived session mode."""
    return _session_out(services["coordinator"].snapshot())


# ── Focus ──────────────────────────────────────────────────────────────────

@router.post("/focus/start", response_model=SessionOut)
async def start_focus(req: StartFocusRequest, services=Depends(_get_services)):
    """Start focusing on a task (stops any break). Marks a to-do task in progress."""
    snapshot = await services["coordinator"].begin_task(req.task_id)
    return _session_out(snapshot)


@router.post("/focus/pause", response_model=SessionOut)
async def pause_focus(services=Depends(_get_services)):
    return _session_out(services["coordinator"].pause_focus())


@router.post("/focus/resume", response_model=SessionOut)
async def resume_focus(services=Depends(_get_services)):
    return _session_out(services["coordinator"].resume_focus())


@router.post("/focus/stop", response_model=SessionOut)
async def stop_focus(services=Depends(_get_services)):
    return _session_out(services["coordinator"].stop_focus())


# ── Break ──────────────────────────────────────────────────────────────────

@router.post("/break/start", response_model=SessionOut)
async def start_break(req: StartBreakRequest, services=Depends(_get_services)):
    """Start a short break (stops the focus timer)."""
    coordinator = services["coordinator"]
    task_id = req.task_id if req.task_id is not None else coordinator.focus_task_id()
    return _session_out(coordinator.start_break(task_id))


@router.post("/break/stop", response_model=SessionOut)
async def stop_break(services=Depends(_get_services)):
    return _session_out(services["coordinator"].stop_break())


# ── Stream ─────────────────────────────────────────────────────────────────

@router.websocket("/ws")
async def timers_websocket(websocket: WebSocket):
    """
    WebSocket stream — pushes the session snapshot every second while
    connected. The dashboard uses it for the live countdown.
    """
    services = websocket.app.state.services
    await websocket.accept()
    try:
        while True:
            snapshot = services["coordinator"].snapshot()
            await websocket.send_json(_session_out(snapshot).model_dump())
            # receive doubles as the 1 s wait and notices disconnects
            try:
                await asyncio.wait_for(websocket.receive_text(), timeout=1.0)
            except asyncio.TimeoutError:
                pass
    except WebSocketDisconnect:
        pass
