"""TaskStore: the authoritative task list, mirrored to key-value storage."""

from __future__ import annotations

import uuid
from collections.abc import Callable

from todolist import log
from todolist.config import STORAGE_KEY
from todolist.errors import MalformedRecordError, StoreNotReadyError
from todolist.storage import KeyValueStorage
from todolist.tasks.io import dump_record, parse_record
from todolist.tasks.model import Task

Listener = Callable[[tuple[Task, ...]], None]


def _new_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """Ordered task collection with persist-then-publish mutations.

    Usage::

        store = TaskStore(FileStorage(path))
        store.load()                    # must happen before any mutation
        task = store.create("Buy milk") # None if the title is blank
        store.toggle_completed(task.id)
        store.delete(task.id)

    Every mutation writes the full snapshot under ``key`` before it
    replaces the in-memory list; a failed write raises
    :class:`~todolist.errors.StorageWriteError` and changes nothing.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._key = key
        self._id_factory = id_factory
        self._tasks: tuple[Task, ...] = ()
        self._ready = False
        self._listeners: list[Listener] = []

    # ── state queries ────────────────────────────────────────────

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    # ── observers ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the new snapshot after each change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self._tasks)

    # ── persistence ──────────────────────────────────────────────

    def load(self) -> tuple[Task, ...]:
        """Read the persisted record; missing or malformed data yields an empty list."""
        raw = self._storage.get_item(self._key)
        tasks: list[Task] = []
        if raw is not None:
            try:
                tasks = parse_record(raw)
            except MalformedRecordError as exc:
                log.warn(f"Error fetching todos: {exc}")
                tasks = []
        self._tasks = tuple(tasks)
        self._ready = True
        log.debug(f"Loaded {len(self._tasks)} task(s) from '{self._key}'")
        self._publish()
        return self._tasks

    def _commit(self, tasks: list[Task]) -> None:
        self._storage.set_item(self._key, dump_record(tasks))
        self._tasks = tuple(tasks)
        self._publish()

    def _unique_id(self) -> str:
        taken = {t.id for t in self._tasks}
        while True:
            candidate = self._id_factory()
            if candidate not in taken:
                return candidate

    def _require_ready(self) -> None:
        if not self._ready:
            raise StoreNotReadyError("TaskStore.load() must run before mutations")

    # ── mutations ────────────────────────────────────────────────

    def create(self, title: str) -> Task | None:
        self._require_ready()
        title = title.strip()
        if not title:
            return None
        task = Task(id=self._unique_id(), title=title)
        self._commit([*self._tasks, task])
        log.debug(f"Task {task.id}: created")
        return task

    def update(self, task_id: str, title: str) -> Task | None:
        """Replace the title of *task_id*; completion state and id are kept."""
        self._require_ready()
        title = title.strip()
        if not title or self.get(task_id) is None:
            return None
        updated: Task | None = None
        tasks: list[Task] = []
        for t in self._tasks:
            if t.id == task_id:
                t = updated = t.with_title(title)
            tasks.append(t)
        self._commit(tasks)
        log.debug(f"Task {task_id}: title updated")
        return updated

    def toggle_completed(self, task_id: str) -> Task | None:
        self._require_ready()
        if self.get(task_id) is None:
            return None
        toggled: Task | None = None
        tasks: list[Task] = []
        for t in self._tasks:
            if t.id == task_id:
                t = toggled = t.toggled()
            tasks.append(t)
        self._commit(tasks)
        log.debug(f"Task {task_id}: completed -> {toggled.completed if toggled else '?'}")
        return toggled

    def delete(self, task_id: str) -> bool:
        self._require_ready()
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            return False
        self._commit(remaining)
        log.debug(f"Task {task_id}: deleted")
        return True

    def complete_all(self) -> int:
        """Mark every task completed. Returns how many changed."""
        self._require_ready()
        changed = sum(1 for t in self._tasks if not t.completed)
        self._commit([t.as_completed() for t in self._tasks])
        return changed

    def clear_completed(self) -> int:
        """Remove completed tasks. Returns how many were removed."""
        self._require_ready()
        remaining = [t for t in self._tasks if not t.completed]
        removed = len(self._tasks) - len(remaining)
        self._commit(remaining)
        return removed
