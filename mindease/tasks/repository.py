"""
Task repository — the engine's view of the external task document store.

get_task() only reads the local cache. refresh_task() pulls a fresh copy from
the remote store into the cache; update_task_status() writes through and keeps
the cached copy in step.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional

import httpx

from ..exceptions import TaskRepositoryError
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


class TaskRepository(ABC):

    def __init__(self):
        self._cache: Dict[str, Task] = {}

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._cache.get(task_id)

    def cache_task(self, task: Task) -> None:
        self._cache[task.id] = task

    def forget_task(self, task_id: str) -> None:
        self._cache.pop(task_id, None)

    @abstractmethod
    async def refresh_task(self, task_id: str) -> None:
        """Reload *task_id* from the remote store into the cache."""

    @abstractmethod
    async def update_task_status(self, task_id: str, status: TaskStatus) -> None:
        ...


class InMemoryTaskRepository(TaskRepository):
    """Remote store simulated by a dict; used by the local API and tests."""

    def __init__(self, tasks: Optional[List[Task]] = None):
        super().__init__()
        self._remote: Dict[str, Task] = {t.id: t for t in tasks or []}

    def put(self, task: Task) -> Task:
        """Create or replace a task in the remote store and cache it."""
        self._remote[task.id] = task
        self.cache_task(task)
        return task

    def all_tasks(self) -> List[Task]:
        return list(self._remote.values())

    async def refresh_task(self, task_id: str) -> None:
        task = self._remote.get(task_id)
        if task is None:
            self.forget_task(task_id)
            return
        self.cache_task(task)

    async def update_task_status(self, task_id: str, status: TaskStatus) -> None:
        task = self._remote.get(task_id)
        if task is None:
            raise TaskRepositoryError(f"Task not found: {task_id!r}")
        updated = replace(task, status=status)
        self._remote[task_id] = updated
        self.cache_task(updated)


class DocumentStoreTaskRepository(TaskRepository):
    """
    REST document store client.

        GET   {base_url}/users/{user_id}/tasks/{task_id}
        PATCH {base_url}/users/{user_id}/tasks/{task_id}   {"status": 2}
    """

    def __init__(self, client: httpx.AsyncClient, user_id: str):
        super().__init__()
        self._client = client
        self._user_id = user_id

    def _path(self, task_id: str) -> str:
        return f"/users/{self._user_id}/tasks/{task_id}"

    async def refresh_task(self, task_id: str) -> None:
        try:
            response = await self._client.get(self._path(task_id))
            if response.status_code == 404:
                self.forget_task(task_id)
                return
            response.raise_for_status()
            task = Task.from_dict(response.json())
        except httpx.HTTPError as exc:
            raise TaskRepositoryError(f"Could not fetch task {task_id!r}") from exc
        except (KeyError, ValueError, TypeError) as exc:
            raise TaskRepositoryError(f"Malformed task document {task_id!r}") from exc
        self.cache_task(task)

    async def update_task_status(self, task_id: str, status: TaskStatus) -> None:
        try:
            response = await self._client.patch(self._path(task_id), json={"status": int(status)})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TaskRepositoryError(f"Could not update task {task_id!r}") from exc

        cached = self.get_task(task_id)
        if cached is not None:
            self.cache_task(replace(cached, status=status))
        logger.info(
            "Task status updated",
            extra={"context": {"task_id": task_id, "status": status.name}},
        )
