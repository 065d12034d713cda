"""Rich rendering of a :class:`~todolist.view.TodoView`."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from todolist.tasks.model import FilterMode
from todolist.view import TodoView

SKELETON_ROWS = 4
SHORT_ID = 8


def short_id(task_id: str) -> str:
    return task_id[:SHORT_ID]


def render_skeleton(console: Console) -> None:
    """Placeholder shown while tasks are still loading."""
    table = Table(title="Todo List", expand=True, show_header=False)
    table.add_column("placeholder")
    for width in (28, 22, 34, 18)[:SKELETON_ROWS]:
        table.add_row(Text("░" * width, style="dim"))
    console.print(table)


def build_table(view: TodoView) -> Table:
    table = Table(title="Todo List", expand=True, title_style="bold blue")
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Done", justify="center", no_wrap=True)
    table.add_column("Title")
    for position, task in enumerate(view.tasks, start=1):
        title = Text(task.title, style="strike dim" if task.completed else "")
        table.add_row(
            str(position),
            short_id(task.id),
            "[green]✔[/green]" if task.completed else "[ ]",
            title,
        )
    return table


def render_filters(view: TodoView) -> Text:
    line = Text("Filter: ")
    for mode in (FilterMode.ALL, FilterMode.UNCOMPLETED, FilterMode.COMPLETED):
        style = "bold green" if mode is view.filter_mode else "dim"
        line.append(mode.label, style=style)
        line.append("  ")
    return line


def render_view(view: TodoView, console: Console) -> None:
    if view.is_loading:
        render_skeleton(console)
        return

    console.print(build_table(view))
    if not view.tasks:
        console.print("[dim]No tasks to show.[/dim]")
    console.print(render_filters(view))
    console.print(
        f"Completed: [bold]{view.completed_count}[/bold]    "
        f"Total Tasks: [bold]{view.total_count}[/bold]"
    )


def render_prompt_hint(view: TodoView) -> str:
    """Status line for the interactive shell's input box."""
    state = "enabled" if view.can_submit else "disabled"
    draft = view.draft_text or ""
    return f"[{view.button_label}: {state}] draft: {draft!r}"
