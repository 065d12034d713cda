"""Tests for todolist.store.TaskStore: mutations, persistence and loading."""

from __future__ import annotations

import json

import pytest

from todolist.config import STORAGE_KEY
from todolist.errors import StorageWriteError, StoreNotReadyError
from todolist.storage import MemoryStorage
from todolist.store import TaskStore
from todolist.tasks.model import Task


def _persisted(storage) -> list[dict]:
    raw = storage.get_item(STORAGE_KEY)
    return json.loads(raw) if raw is not None else []


def _in_memory(store: TaskStore) -> list[dict]:
    return [t.to_dict() for t in store.tasks]


# ═══════════════════════════════════════════════════════════════════
#  Loading
# ═══════════════════════════════════════════════════════════════════


class TestLoad:
    """Tests for TaskStore.load()."""

    def test_missing_record_loads_empty(self):
        store = TaskStore(MemoryStorage())
        assert not store.ready
        assert store.load() == ()
        assert store.ready

    def test_loads_persisted_record(self):
        """A stored single task comes back as that task."""
        raw = '[{"id":"x","title":"Test","completed":false}]'
        store = TaskStore(MemoryStorage({STORAGE_KEY: raw}))
        store.load()
        assert store.ready
        assert store.tasks == (Task(id="x", title="Test", completed=False),)

    def test_malformed_record_loads_empty(self):
        """Unparsable data is logged and treated as no data."""
        store = TaskStore(MemoryStorage({STORAGE_KEY: "{not json"}))
        assert store.load() == ()
        assert store.ready

    def test_non_array_record_loads_empty(self):
        store = TaskStore(MemoryStorage({STORAGE_KEY: '{"id": "x"}'}))
        assert store.load() == ()

    def test_load_notifies_subscribers(self):
        store = TaskStore(MemoryStorage())
        seen = []
        store.subscribe(seen.append)
        store.load()
        assert seen == [()]

    def test_mutation_before_load_raises(self):
        store = TaskStore(MemoryStorage())
        with pytest.raises(StoreNotReadyError):
            store.create("too early")


# ═══════════════════════════════════════════════════════════════════
#  Create / Update
# ═══════════════════════════════════════════════════════════════════


class TestCreate:
    """Tests for TaskStore.create()."""

    def test_create_appends_uncompleted_task(self, store):
        task = store.create("Buy milk")
        assert task == Task(id="t1", title="Buy milk", completed=False)
        assert store.tasks == (task,)

    def test_create_trims_title(self, store):
        task = store.create("  Buy milk \n")
        assert task.title == "Buy milk"

    @pytest.mark.parametrize("title", ["", " ", "\t\n", "   　 "])
    def test_blank_title_is_noop(self, store, storage, title):
        store.create("keep")
        before = store.tasks
        writes = storage.writes
        assert store.create(title) is None
        assert store.tasks == before
        assert storage.writes == writes

    def test_create_keeps_insertion_order(self, store):
        store.create("a")
        store.create("b")
        store.create("c")
        assert [t.title for t in store.tasks] == ["a", "b", "c"]

    def test_ids_unique_even_if_factory_repeats(self, storage):
        ids = iter(["dup", "dup", "other"])
        store = TaskStore(storage, id_factory=lambda: next(ids))
        store.load()
        first = store.create("one")
        second = store.create("two")
        assert first.id == "dup"
        assert second.id == "other"

    def test_default_ids_are_unique(self):
        store = TaskStore(MemoryStorage())
        store.load()
        ids = {store.create(f"task {i}").id for i in range(50)}
        assert len(ids) == 50


class TestUpdate:
    """Tests for TaskStore.update()."""

    def test_update_replaces_title_only(self, store):
        task = store.create("old")
        store.toggle_completed(task.id)
        updated = store.update(task.id, " new ")
        assert updated == Task(id=task.id, title="new", completed=True)
        assert store.get(task.id) == updated

    def test_update_unknown_id_is_noop(self, store, storage):
        store.create("a")
        before = store.tasks
        writes = storage.writes
        assert store.update("missing", "new title") is None
        assert store.tasks == before
        assert storage.writes == writes

    def test_update_blank_title_is_noop(self, store):
        task = store.create("a")
        assert store.update(task.id, "   ") is None
        assert store.get(task.id).title == "a"


# ═══════════════════════════════════════════════════════════════════
#  Toggle / Delete / Bulk
# ═══════════════════════════════════════════════════════════════════


class TestToggleAndDelete:
    """Tests for toggle_completed() and delete()."""

    def test_toggle_twice_restores(self, store):
        task = store.create("a")
        assert store.toggle_completed(task.id).completed is True
        assert store.toggle_completed(task.id).completed is False
        assert store.get(task.id) == task

    def test_toggle_unknown_is_noop(self, store):
        store.create("a")
        before = store.tasks
        assert store.toggle_completed("nope") is None
        assert store.tasks == before

    def test_create_then_delete_round_trip(self, store, storage):
        store.create("a")
        before_tasks = store.tasks
        before_record = _persisted(storage)
        task = store.create("b")
        assert store.delete(task.id) is True
        assert store.tasks == before_tasks
        assert _persisted(storage) == before_record

    def test_delete_unknown_returns_false(self, store):
        store.create("a")
        assert store.delete("nope") is False
        assert len(store) == 1


class TestBulk:
    """Tests for complete_all() and clear_completed()."""

    def test_complete_all_is_idempotent(self, store):
        for title in ("a", "b", "c"):
            store.create(title)
        store.toggle_completed("t2")
        assert store.complete_all() == 2
        once = store.tasks
        assert store.complete_all() == 0
        assert store.tasks == once
        assert all(t.completed for t in store.tasks)

    def test_clear_completed_twice(self, store):
        for title in ("a", "b", "c"):
            store.create(title)
        store.toggle_completed("t1")
        store.toggle_completed("t3")
        assert store.clear_completed() == 2
        assert [t.id for t in store.tasks] == ["t2"]
        after = store.tasks
        assert store.clear_completed() == 0
        assert store.tasks == after


# ═══════════════════════════════════════════════════════════════════
#  Persistence contract
# ═══════════════════════════════════════════════════════════════════


class TestPersistence:
    """Memory and storage never diverge."""

    def test_memory_matches_storage_after_each_operation(self, store, storage):
        ops = [
            lambda: store.create("Buy milk"),
            lambda: store.create("Walk dog"),
            lambda: store.toggle_completed("t1"),
            lambda: store.update("t2", "Walk the dog"),
            lambda: store.create("Call mom"),
            lambda: store.delete("t3"),
            lambda: store.complete_all(),
            lambda: store.clear_completed(),
        ]
        for op in ops:
            op()
            assert _persisted(storage) == _in_memory(store)

    def test_failed_write_changes_nothing(self, store, storage):
        store.create("a")
        before = store.tasks
        record = _persisted(storage)
        storage.fail_writes = True
        for op in (
            lambda: store.create("b"),
            lambda: store.update("t1", "changed"),
            lambda: store.toggle_completed("t1"),
            lambda: store.delete("t1"),
            lambda: store.complete_all(),
        ):
            with pytest.raises(StorageWriteError):
                op()
            assert store.tasks == before
            assert _persisted(storage) == record

    def test_failed_write_does_not_notify(self, store, storage):
        seen = []
        store.subscribe(seen.append)
        storage.fail_writes = True
        with pytest.raises(StorageWriteError):
            store.create("a")
        assert seen == []

    def test_quota_exceeded_surfaces_as_write_error(self):
        store = TaskStore(MemoryStorage(quota_bytes=300))
        store.load()
        store.create("x")
        with pytest.raises(StorageWriteError, match="quota"):
            store.create("a much longer title that will not fit in the tiny quota")
        assert [t.title for t in store.tasks] == ["x"]

    def test_unknown_fields_pass_through(self):
        raw = '[{"id":"x","title":"Test","completed":false,"priority":2}]'
        storage = MemoryStorage({STORAGE_KEY: raw})
        store = TaskStore(storage)
        store.load()
        store.update("x", "Renamed")
        assert _persisted(storage) == [
            {"priority": 2, "id": "x", "title": "Renamed", "completed": False}
        ]

    def test_unsubscribe_stops_notifications(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        store.create("a")
        unsubscribe()
        store.create("b")
        assert len(seen) == 1
