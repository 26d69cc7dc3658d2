"""
Shared pytest fixtures and configuration.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import mindease.settings as settings_mod
from mindease.api.app import create_app
from mindease.signals.storage import MemorySessionStorage
from mindease.signals.store import SignalStore
from mindease.tasks.models import Subtask, Task
from mindease.tasks.repository import InMemoryTaskRepository


class FakeClock:
    """Manually advanced clock. Call it for the current time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds

    def ms(self) -> int:
        return int(self.t * 1000)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def storage():
    return MemorySessionStorage()


@pytest.fixture()
def signals(storage, clock):
    return SignalStore(storage, clock=clock.ms)


@pytest.fixture()
def tasks():
    return InMemoryTaskRepository([
        Task(id="t1", title="Write essay"),
        Task(
            id="t2",
            title="Read chapter",
            subtasks=[Subtask(id="s1", title="Pages 1-10", completed=False)],
        ),
    ])


@pytest.fixture()
def tmp_settings_file(tmp_path: Path, monkeypatch):
    """
    Redirect the settings store to a fresh temp file for each test.
    Also resets the in-memory cache so each test starts clean.
    """
    fake_file = tmp_path / "settings.json"
    monkeypatch.setattr(settings_mod, "_FILE", fake_file)
    monkeypatch.setattr(settings_mod, "_current", {})
    yield fake_file
    monkeypatch.setattr(settings_mod, "_current", {})


@pytest.fixture()
def app(tmp_settings_file):
    """Fresh app per test, backed by in-memory session and task stores."""
    return create_app(storage=MemorySessionStorage(), tasks=InMemoryTaskRepository())


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
