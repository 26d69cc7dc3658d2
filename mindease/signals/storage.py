"""
Session-scoped key-value storage.

The engine only needs a tiny sessionStorage-like contract: opaque text values
under string keys. Backends raise StorageError on failure; callers decide how
to degrade.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..exceptions import StorageError


class SessionStorage(ABC):

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for *key*, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemorySessionStorage(SessionStorage):
    """Process-local storage; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileSessionStorage(SessionStorage):
    """All keys live in one JSON object on disk, rewritten on every set."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read session store {self.path}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Session store {self.path} is not a JSON object")
        return data

    def _write_all(self, items: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(items), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot write session store {self.path}") from exc

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read_all()
        except StorageError:
            items = {}    # corrupt file is replaced on the next write
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)
