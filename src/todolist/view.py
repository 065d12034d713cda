"""Presentation-ready view derived from a task snapshot."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from todolist.tasks.model import FilterMode, Task


@dataclass(frozen=True)
class TodoView:
    tasks: tuple[Task, ...]
    filter_mode: FilterMode
    draft_text: str
    is_editing: bool
    completed_count: int
    total_count: int
    is_loading: bool

    @property
    def can_submit(self) -> bool:
        """Primary button state: enabled while typing or while an edit is pending."""
        return bool(self.draft_text.strip()) or self.is_editing

    @property
    def button_label(self) -> str:
        return "Update" if self.is_editing else "Add"


def filter_tasks(tasks: Sequence[Task], mode: FilterMode) -> tuple[Task, ...]:
    """Tasks matching *mode*, newest first."""
    return tuple(t for t in reversed(tasks) if mode.matches(t))


def derive_view(
    tasks: Sequence[Task],
    mode: FilterMode = FilterMode.ALL,
    *,
    draft_text: str = "",
    is_editing: bool = False,
    is_loading: bool = False,
) -> TodoView:
    return TodoView(
        tasks=filter_tasks(tasks, mode),
        filter_mode=mode,
        draft_text=draft_text,
        is_editing=is_editing,
        completed_count=sum(1 for t in tasks if t.completed),
        total_count=len(tasks),
        is_loading=is_loading,
    )
