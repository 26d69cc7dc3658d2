"""
/signals — behavioral signal state and the user-activity hooks that feed it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import FocusTimeOut, SignalStateOut

router = APIRouter(prefix="/signals", tags=["signals"])


def _get_signals(request: Request):
    return request.app.state.services["signals"]


def _state_out(signals) -> SignalStateOut:
    return SignalStateOut(
        **signals.state.to_dict(),
        navigation_ms=signals.get_navigation_time(),
    )


@router.get("", response_model=SignalStateOut)
async def get_signals(signals=Depends(_get_signals)):
    return _state_out(signals)


@router.post("/user-action", response_model=SignalStateOut)
async def user_action(signals=Depends(_get_signals)):
    """Any meaningful interaction; also ends idle navigation."""
    signals.update_user_action()
    return _state_out(signals)


@router.post("/navigation/start", response_model=SignalStateOut)
async def start_navigation(signals=Depends(_get_signals)):
    signals.start_navigation()
    return _state_out(signals)


@router.post("/navigation/stop", response_model=SignalStateOut)
async def stop_navigation(signals=Depends(_get_signals)):
    signals.stop_navigation()
    return _state_out(signals)


@router.post("/reset-session", response_model=SignalStateOut)
async def reset_session(signals=Depends(_get_signals)):
    """Forget which alerts were shown (new browsing session)."""
    signals.reset_session()
    return _state_out(signals)


@router.get("/tasks/{task_id}/focus-time", response_model=FocusTimeOut)
async def task_focus_time(task_id: str, signals=Depends(_get_signals)):
    return FocusTimeOut(task_id=task_id, focus_ms=signals.get_task_focus_time(task_id))
