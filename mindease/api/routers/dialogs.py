"""
/dialogs — session-complete decision dialogs.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import DialogOut, DialogsOut
from ...exceptions import DialogActionError
from ...session.dialogs import BreakAction, FocusAction

router = APIRouter(prefix="/dialogs", tags=["dialogs"])


def _get_services(request: Request):
    return request.app.state.services


def _dialogs_out(services) -> DialogsOut:
    return DialogsOut(
        focus=DialogOut(**services["focus_dialog"].view()),
        rest=DialogOut(**services["break_dialog"].view()),
    )


@router.get("", response_model=DialogsOut)
async def get_dialogs(services=Depends(_get_services)):
    """Return both dialogs. Finishes any pending task lookup first."""
    await services["watcher"].resolve_pending()
    return _dialogs_out(services)


@router.post("/{kind}/close", response_model=DialogsOut)
async def close_dialog(kind: str, services=Depends(_get_services)):
    """Dismiss without choosing. Refused while the dialog prevents closing."""
    dialog = {"focus": services["focus_dialog"], "break": services["break_dialog"]}.get(kind)
    if dialog is None:
        raise HTTPException(status_code=404, detail="Unknown dialog")
    if not dialog.request_close():
        raise DialogActionError(f"{kind} dialog requires a decision")
    return _dialogs_out(services)


@router.post("/focus/{action}", response_model=DialogsOut)
async def focus_action(action: FocusAction, services=Depends(_get_services)):
    """start_break | continue_focus | finish_task"""
    await services["focus_dialog"].perform(action)
    return _dialogs_out(services)


@router.post("/break/{action}", response_model=DialogsOut)
async def break_action(action: BreakAction, services=Depends(_get_services)):
    """start_focus | end_focus"""
    await services["break_dialog"].perform(action)
    return _dialogs_out(services)
