"""Task data model and the filter modes applied to a task list."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

KNOWN_FIELDS = ("id", "title", "completed")


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    completed: bool = False
    # Fields from a record we do not understand; written back unchanged.
    extra: dict[str, Any] = field(default_factory=dict)

    def with_title(self, title: str) -> Task:
        return replace(self, title=title)

    def toggled(self) -> Task:
        return replace(self, completed=not self.completed)

    def as_completed(self) -> Task:
        return self if self.completed else replace(self, completed=True)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data["id"] = self.id
        data["title"] = self.title
        data["completed"] = self.completed
        return data


class FilterMode(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    UNCOMPLETED = "uncompleted"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def matches(self, task: Task) -> bool:
        if self is FilterMode.COMPLETED:
            return task.completed
        if self is FilterMode.UNCOMPLETED:
            return not task.completed
        return True
