"""TodoController: turns user intents into TaskStore operations.

Holds the session-only state that is never persisted (draft text, filter
mode, the id of the task being edited) and derives the view the
presentation layer renders.
"""

from __future__ import annotations

from collections.abc import Callable

from todolist import log
from todolist.debounce import Debouncer
from todolist.errors import StorageWriteError
from todolist.notify import Notifier
from todolist.store import TaskStore
from todolist.tasks.model import FilterMode, Task
from todolist.timers import EventLoop
from todolist.view import TodoView, derive_view

ADD_DEBOUNCE_SECONDS = 0.5

ViewListener = Callable[[TodoView], None]


class TodoController:
    """Intent handling for one session.

    Usage::

        ctl = TodoController(store, loop, notifier)
        ctl.start()                  # loading -> ready
        ctl.set_draft("Buy milk")
        ctl.press()                  # debounced add (or update while editing)
        loop.run_until_idle()        # the add fires after the quiet period
        ctl.close()                  # drops any pending add
    """

    def __init__(
        self,
        store: TaskStore,
        loop: EventLoop,
        notifier: Notifier | None = None,
        *,
        debounce: float = ADD_DEBOUNCE_SECONDS,
    ) -> None:
        self._store = store
        self._notifier = notifier or Notifier()
        self._draft = ""
        self._filter = FilterMode.ALL
        self._edit_id: str | None = None
        self._listeners: list[ViewListener] = []
        self._closed = False
        self._add = Debouncer(self._commit_add, debounce, loop)
        self._unsubscribe = store.subscribe(self._on_store_change)

    # ── session state ────────────────────────────────────────────

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def filter_mode(self) -> FilterMode:
        return self._filter

    @property
    def edit_id(self) -> str | None:
        return self._edit_id

    @property
    def is_loading(self) -> bool:
        return not self._store.ready

    @property
    def add_pending(self) -> bool:
        return self._add.pending

    def view(self) -> TodoView:
        return derive_view(
            self._store.tasks,
            self._filter,
            draft_text=self._draft,
            is_editing=self._edit_id is not None,
            is_loading=self.is_loading,
        )

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        if not self._listeners:
            return
        snapshot = self.view()
        for listener in list(self._listeners):
            listener(snapshot)

    def _on_store_change(self, _tasks: tuple[Task, ...]) -> None:
        # A pending add captured the old collection; drop it.
        self._add.cancel()
        self._changed()

    # ── lifecycle ────────────────────────────────────────────────

    def start(self) -> TodoView:
        """Load persisted tasks. The view stops loading once this returns."""
        if self._store.ready:
            return self.view()
        self._store.load()
        return self.view()

    def flush(self) -> None:
        """Commit a pending add immediately."""
        self._add.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._add.pending:
            log.debug("Dropping pending add on close")
        self._add.cancel()
        self._unsubscribe()
        self._listeners.clear()

    # ── intents ──────────────────────────────────────────────────

    def set_draft(self, text: str) -> None:
        if text == self._draft:
            return
        self._draft = text
        # A pending add captured the old draft; drop it.
        self._add.cancel()
        self._changed()

    def set_filter(self, mode: FilterMode | str) -> None:
        mode = FilterMode(mode)
        if mode is self._filter:
            return
        self._filter = mode
        self._changed()

    def press(self) -> None:
        """Primary button: update while editing, otherwise a debounced add."""
        if not self._draft.strip() and self._edit_id is None:
            return
        if self._edit_id is not None:
            self._commit_update()
        else:
            self._add(self._draft)

    def begin_edit(self, task_id: str) -> None:
        task = self._store.get(task_id)
        if task is None:
            return
        self._edit_id = task.id
        if self._draft != task.title:
            self._draft = task.title
            self._add.cancel()
        self._changed()

    def toggle(self, task_id: str) -> None:
        try:
            self._store.toggle_completed(task_id)
        except StorageWriteError as exc:
            log.debug(f"Toggle failed: {exc}")
            self._notifier.error("Error updating task")

    def delete(self, task_id: str) -> None:
        try:
            removed = self._store.delete(task_id)
        except StorageWriteError as exc:
            log.debug(f"Delete failed: {exc}")
            self._notifier.error("Error deleting task")
            return
        if not removed:
            return
        if self._edit_id == task_id:
            self._edit_id = None
            self._changed()
        self._notifier.success("Task deleted successfully")

    def complete_all(self) -> None:
        try:
            self._store.complete_all()
        except StorageWriteError as exc:
            log.debug(f"Complete all failed: {exc}")
            self._notifier.error("Error completing tasks")

    def clear_completed(self) -> None:
        try:
            self._store.clear_completed()
        except StorageWriteError as exc:
            log.debug(f"Clear completed failed: {exc}")
            self._notifier.error("Error deleting completed tasks")
            return
        if self._edit_id is not None and self._store.get(self._edit_id) is None:
            self._edit_id = None
            self._changed()

    # ── commits ──────────────────────────────────────────────────

    def _commit_add(self, title: str) -> None:
        if self._closed or not title.strip():
            return
        try:
            task = self._store.create(title)
        except StorageWriteError as exc:
            log.debug(f"Add failed: {exc}")
            self._notifier.error("Error adding task")
            return
        if task is None:
            return
        self._draft = ""
        self._changed()
        self._notifier.success("Task added successfully")

    def _commit_update(self) -> None:
        if not self._draft.strip():
            return
        edit_id = self._edit_id
        try:
            task = self._store.update(edit_id, self._draft)
        except StorageWriteError as exc:
            log.debug(f"Update failed: {exc}")
            self._notifier.error("Error updating task")
            return
        self._edit_id = None
        if task is None:
            # The task is gone; keep the text as a fresh draft.
            log.debug(f"Task {edit_id}: no longer exists, leaving edit mode")
            self._changed()
            return
        self._draft = ""
        self._changed()
        self._notifier.success("Task updated successfully")
