"""
/tasks — seed and inspect the in-memory task store used by the local engine.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ...api.schemas import TaskIn, TaskOut
from ...exceptions import TaskRepositoryError
from ...tasks.models import Task
from ...tasks.repository import InMemoryTaskRepository

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _get_tasks(request: Request):
    return request.app.state.services["tasks"]


@router.post("", response_model=TaskOut, status_code=201)
async def put_task(task: TaskIn, tasks=Depends(_get_tasks)):
    """Create or replace a task. Only available with the in-memory store."""
    if not isinstance(tasks, InMemoryTaskRepository):
        raise HTTPException(status_code=405, detail="Tasks are managed by the document store")
    saved = tasks.put(Task.from_dict(task.model_dump()))
    return TaskOut(**saved.to_dict())


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(task_id: str, tasks=Depends(_get_tasks)):
    task = tasks.get_task(task_id)
    if task is None:
        try:
            await tasks.refresh_task(task_id)
        except TaskRepositoryError as exc:
            raise HTTPException(status_code=502, detail=str(exc))
        task = tasks.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskOut(**task.to_dict())
