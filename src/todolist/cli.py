"""todolist CLI.

Installed as ``todolist`` console_script. Every command opens a session
on the storage file, applies one intent through the controller, and
renders the resulting list.
"""

from __future__ import annotations

import sys
from collections.abc import Callable

import click

from todolist import __version__
from todolist import log
from todolist.config import Config
from todolist.controller import TodoController
from todolist.render import render_view
from todolist.session import Session, TaskRefError, open_session
from todolist.tasks.model import FilterMode

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

FILTER_CHOICE = click.Choice([m.value for m in FilterMode], case_sensitive=False)


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option(
    "--storage",
    "storage_path",
    default="",
    envvar="TODOLIST_STORAGE_PATH",
    help="Storage file (default: ~/.todolist/storage.json)",
)
@click.option("--debounce-ms", type=int, default=-1, help="Quiet period for the add button")
@click.option("--desktop-notify/--no-desktop-notify", default=None, help="Show desktop toasts")
@click.option("-q", "--quiet", is_flag=True, help="Hide success messages")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="todolist")
@click.pass_context
def main(
    ctx: click.Context,
    storage_path: str,
    debounce_ms: int,
    desktop_notify: bool | None,
    quiet: bool,
    verbose: bool,
) -> None:
    """Todo List: add, edit, complete, delete and filter tasks.

    \b
    EXAMPLES:
      todolist add "Buy milk"
      todolist list --filter uncompleted
      todolist toggle 1            # position in the shown list
      todolist edit 3f2a "Buy oat milk"
      todolist shell               # interactive mode
    """
    log.set_verbose(verbose)
    log.set_quiet(quiet)

    ctx.obj = Config(
        storage_path=storage_path,
        debounce_ms=debounce_ms,
        desktop_notifications=desktop_notify,
        verbose=verbose,
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(list_tasks)


# ── Helpers ──────────────────────────────────────────────────────────


def _run(
    cfg: Config,
    action: Callable[[Session], None],
    *,
    mode: FilterMode = FilterMode.ALL,
    show: bool = True,
) -> None:
    session = open_session(cfg)
    try:
        session.controller.set_filter(mode)
        action(session)
        session.controller.flush()
        if show:
            render_view(session.controller.view(), log.console)
    finally:
        session.close()


def _resolve(session: Session, ref: str) -> str:
    try:
        return session.resolve(ref)
    except TaskRefError as exc:
        raise click.BadParameter(str(exc), param_hint="TASK") from exc


def _on_task(method: Callable[[TodoController, str], None], ref: str) -> Callable[[Session], None]:
    def action(session: Session) -> None:
        method(session.controller, _resolve(session, ref))

    return action


# ── Commands ─────────────────────────────────────────────────────────


@main.command("list")
@click.option("--filter", "-f", "mode", type=FILTER_CHOICE, default="all", help="Which tasks to show")
@click.pass_obj
def list_tasks(cfg: Config, mode: str = "all") -> None:
    """Show tasks, newest first."""
    _run(cfg, lambda session: None, mode=FilterMode(mode.lower()))


@main.command()
@click.argument("title", nargs=-1, required=True)
@click.pass_obj
def add(cfg: Config, title: tuple[str, ...]) -> None:
    """Add a task."""
    text = " ".join(title)
    if not text.strip():
        raise click.BadParameter("title cannot be blank", param_hint="TITLE")

    def action(session: Session) -> None:
        session.controller.set_draft(text)
        session.controller.press()

    _run(cfg, action)


@main.command()
@click.argument("task")
@click.argument("title", nargs=-1, required=True)
@click.pass_obj
def edit(cfg: Config, task: str, title: tuple[str, ...]) -> None:
    """Change the title of TASK."""
    text = " ".join(title)
    if not text.strip():
        raise click.BadParameter("title cannot be blank", param_hint="TITLE")

    def action(session: Session) -> None:
        ctl = session.controller
        ctl.begin_edit(_resolve(session, task))
        ctl.set_draft(text)
        ctl.press()

    _run(cfg, action)


@main.command()
@click.argument("task")
@click.pass_obj
def toggle(cfg: Config, task: str) -> None:
    """Flip TASK between completed and not completed."""
    _run(cfg, _on_task(TodoController.toggle, task))


@main.command("rm")
@click.argument("task")
@click.pass_obj
def remove(cfg: Config, task: str) -> None:
    """Delete TASK."""
    _run(cfg, _on_task(TodoController.delete, task))


@main.command("complete-all")
@click.pass_obj
def complete_all(cfg: Config) -> None:
    """Mark every task completed."""
    _run(cfg, lambda session: session.controller.complete_all())


@main.command("clear-completed")
@click.pass_obj
def clear_completed(cfg: Config) -> None:
    """Delete every completed task."""
    _run(cfg, lambda session: session.controller.clear_completed())


@main.command()
@click.pass_obj
def shell(cfg: Config) -> None:
    """Interactive mode (type 'help' inside for commands)."""
    from todolist.shell import run_shell

    session = open_session(cfg)
    run_shell(session, interactive=sys.stdin.isatty())
