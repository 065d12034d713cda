"""Wire storage, store, controller and timers together for one session."""

from __future__ import annotations

from dataclasses import dataclass

from todolist import log
from todolist.config import Config
from todolist.controller import TodoController
from todolist.notify import Notifier
from todolist.storage import FileStorage, KeyValueStorage
from todolist.store import TaskStore
from todolist.timers import EventLoop


class TaskRefError(ValueError):
    """A task reference matched no task, or more than one."""


@dataclass
class Session:
    store: TaskStore
    controller: TodoController
    loop: EventLoop

    def close(self) -> None:
        self.controller.close()

    def resolve(self, ref: str) -> str:
        """Map a 1-based position in the current view, or an id prefix, to a task id."""
        ref = ref.strip()
        if not ref:
            raise TaskRefError("empty task reference")

        view = self.controller.view()
        if ref.isdigit():
            position = int(ref)
            if 1 <= position <= len(view.tasks):
                return view.tasks[position - 1].id

        exact = self.store.get(ref)
        if exact is not None:
            return exact.id

        matches = [t.id for t in self.store.tasks if t.id.startswith(ref)]
        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise TaskRefError(f"no task matches '{ref}'")
        raise TaskRefError(f"'{ref}' is ambiguous ({len(matches)} tasks match)")


def open_session(
    cfg: Config,
    *,
    storage: KeyValueStorage | None = None,
    loop: EventLoop | None = None,
    notifier: Notifier | None = None,
) -> Session:
    """Build a started session from *cfg*. Callers must ``close()`` it."""
    if storage is None:
        storage = FileStorage(cfg.storage_file, quota_bytes=cfg.quota_bytes)
        log.debug(f"Using storage file {cfg.storage_file}")
    loop = loop or EventLoop()
    notifier = notifier or Notifier.for_console(desktop=bool(cfg.desktop_notifications))
    store = TaskStore(storage, key=cfg.storage_key)
    controller = TodoController(store, loop, notifier, debounce=cfg.debounce_seconds)
    controller.start()
    return Session(store=store, controller=controller, loop=loop)
