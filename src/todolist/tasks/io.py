"""Encode and decode the persisted task record (a JSON array of objects)."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from todolist import log
from todolist.errors import MalformedRecordError
from todolist.tasks.model import KNOWN_FIELDS, Task


def dump_record(tasks: Iterable[Task]) -> str:
    """Serialize *tasks* to the compact JSON array stored under the record key."""
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, separators=(",", ":"))


def _task_from_entry(entry: Any, index: int) -> Task | None:
    if not isinstance(entry, dict):
        log.warn(f"Dropping record entry #{index}: not an object")
        return None

    raw_id = entry.get("id")
    if raw_id is None or isinstance(raw_id, (bool, dict, list)) or str(raw_id) == "":
        log.warn(f"Dropping record entry #{index}: missing id")
        return None

    raw_title = entry.get("title")
    title = raw_title.strip() if isinstance(raw_title, str) else ""
    if not title:
        log.warn(f"Dropping record entry #{index} (id={raw_id}): blank title")
        return None

    completed = entry.get("completed", False)
    if not isinstance(completed, bool):
        log.warn(
            f"Record entry #{index} (id={raw_id}): completed={completed!r} is not a boolean, using false"
        )
        completed = False

    extra = {k: v for k, v in entry.items() if k not in KNOWN_FIELDS}
    return Task(
        id=str(raw_id),
        title=title,
        completed=completed,
        extra=extra,
    )


def parse_record(raw: str) -> list[Task]:
    """Decode a stored record into tasks, in stored order.

    Raises :class:`MalformedRecordError` when *raw* is not a JSON array.
    Entries that cannot become a valid task, or that repeat an earlier id,
    are dropped with a warning rather than failing the whole record.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedRecordError(f"record is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise MalformedRecordError(
            f"record must be a JSON array, got {type(data).__name__}"
        )

    tasks: list[Task] = []
    seen: set[str] = set()
    for index, entry in enumerate(data):
        task = _task_from_entry(entry, index)
        if task is None:
            continue
        if task.id in seen:
            log.warn(f"Dropping record entry #{index}: duplicate id {task.id}")
            continue
        seen.add(task.id)
        tasks.append(task)
    return tasks
