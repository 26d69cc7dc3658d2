"""
Pydantic schemas for the FastAPI local API.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

# ── Timers ─────────────────────────────────────────────────────────────────

class TimerStateOut(BaseModel):
    phase: str
    active_task_id: Optional[str] = None
    remaining_seconds: int
    duration_seconds: int
    elapsed_seconds: int
    display: str = Field(..., description="MM:SS")


class SessionOut(BaseModel):
    mode: str = Field(..., description="idle | focusing | breaking")
    active_task_id: Optional[str] = None
    focus: TimerStateOut
    rest: TimerStateOut


class StartFocusRequest(BaseModel):
    task_id: str = Field(..., min_length=1)


class StartBreakRequest(BaseModel):
    task_id: Optional[str] = None


# ── Dialogs ────────────────────────────────────────────────────────────────

class SubtaskOut(BaseModel):
    id: str
    title: str
    completed: bool = False


class TaskOut(BaseModel):
    id: str
    title: str
    status: int = Field(..., description="0 todo | 1 in progress | 2 done")
    description: str = ""
    subtasks: List[SubtaskOut] = Field(default_factory=list)


class DialogOut(BaseModel):
    kind: str
    is_open: bool
    task_id: Optional[str] = None
    prevent_close: bool = True
    actions: List[str] = Field(default_factory=list)
    loading: bool = False
    task: Optional[TaskOut] = None


class DialogsOut(BaseModel):
    focus: DialogOut
    rest: DialogOut


# ── Alerts ─────────────────────────────────────────────────────────────────

class BannerOut(BaseModel):
    visible: Optional[str] = None
    flags: Dict[str, bool]
    message: str = ""


# ── Signals ────────────────────────────────────────────────────────────────

class TaskFocusTimeOut(BaseModel):
    start_time: int
    total_time: int


class SignalStateOut(BaseModel):
    alert_history: List[str]
    last_alert_time: Optional[int] = None
    consecutive_sessions: int
    navigation_start_time: Optional[int] = None
    task_focus_times: Dict[str, TaskFocusTimeOut]
    last_user_action: Optional[int] = None
    navigation_ms: int = 0


class FocusTimeOut(BaseModel):
    task_id: str
    focus_ms: int


# ── Tasks ──────────────────────────────────────────────────────────────────

class SubtaskIn(BaseModel):
    id: str
    title: str = ""
    completed: bool = False


class TaskIn(BaseModel):
    id: str = Field(..., min_length=1)
    title: str
    status: int = Field(0, ge=0, le=2)
    description: str = ""
    subtasks: List[SubtaskIn] = Field(default_factory=list)
