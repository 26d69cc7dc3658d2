"""
Task model as seen by the focus engine. The engine never owns tasks; it reads
copies from the task repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List


class TaskStatus(IntEnum):
    TODO = 0
    IN_PROGRESS = 1
    DONE = 2


@dataclass
class Subtask:
    id: str
    title: str
    completed: bool = False


@dataclass
class Task:
    id: str
    title: str
    status: TaskStatus = TaskStatus.TODO
    description: str = ""
    subtasks: List[Subtask] = field(default_factory=list)

    def has_incomplete_subtasks(self) -> bool:
        return any(not s.completed for s in self.subtasks)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            status=TaskStatus(int(data.get("status", TaskStatus.TODO))),
            description=str(data.get("description") or ""),
            subtasks=[
                Subtask(
                    id=str(s["id"]),
                    title=str(s.get("title", "")),
                    completed=bool(s.get("completed", False)),
                )
                for s in data.get("subtasks") or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": int(self.status),
            "description": self.description,
            "subtasks": [s.__dict__.copy() for s in self.subtasks],
        }
