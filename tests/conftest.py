"""Shared fixtures for todolist tests.

Time in tests:
- Use the ``clock`` fixture (a FakeClock) so debounce timing is deterministic.
- ``loop.run_until_idle()`` advances the fake clock instead of sleeping.

File handling in tests:
- Use tmp_path for any storage file so tests are isolated and cleaned up.
"""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from todolist.controller import TodoController
from todolist.errors import StorageWriteError
from todolist.notify import Notice, Notifier
from todolist.storage import MemoryStorage
from todolist.store import TaskStore
from todolist.tasks.model import Task
from todolist.timers import EventLoop


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    sleep = advance


class FailingStorage(MemoryStorage):
    """MemoryStorage whose writes can be switched to fail."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_writes = False
        self.writes = 0

    def _write_all(self, items: dict[str, str]) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        self.writes += 1
        super()._write_all(items)


def _make_task(id: str, title: str = "", completed: bool = False) -> Task:
    return Task(id=id, title=title or f"Task {id}", completed=completed)


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def loop(clock: FakeClock) -> EventLoop:
    return EventLoop(clock=clock, sleep=clock.sleep)


@pytest.fixture
def storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"t{next(counter)}"


@pytest.fixture
def store(storage: FailingStorage, id_factory) -> TaskStore:
    s = TaskStore(storage, id_factory=id_factory)
    s.load()
    return s


@pytest.fixture
def notices() -> list[Notice]:
    return []


@pytest.fixture
def controller(store: TaskStore, loop: EventLoop, notices: list[Notice]):
    ctl = TodoController(store, loop, Notifier([notices.append]))
    ctl.start()
    yield ctl
    ctl.close()


@pytest.fixture
def storage_file(tmp_path: Path, monkeypatch) -> Path:
    """Point the CLI at an isolated storage file with no debounce delay."""
    path = tmp_path / "storage.json"
    monkeypatch.setenv("TODOLIST_STORAGE_PATH", str(path))
    monkeypatch.setenv("TODOLIST_DEBOUNCE_MS", "0")
    monkeypatch.delenv("TODOLIST_DESKTOP_NOTIFY", raising=False)
    return path


@pytest.fixture
def cli_runner():
    """Click CliRunner for invoking the CLI in-process."""
    from click.testing import CliRunner
    return CliRunner()
