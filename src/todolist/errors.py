"""Error types raised by the task store and its storage backends."""

from __future__ import annotations


class TodoError(Exception):
    """Base class for todolist errors."""


class MalformedRecordError(TodoError, ValueError):
    """A persisted record exists but cannot be decoded into tasks."""


class StorageWriteError(TodoError):
    """Persisting a snapshot failed (I/O error or quota exceeded).

    The store raises this before touching its in-memory list, so the
    previous snapshot is still what both memory and storage hold.
    """


class StoreNotReadyError(TodoError, RuntimeError):
    """A mutating operation was called before ``TaskStore.load()``."""
