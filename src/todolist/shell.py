"""Interactive shell: the widget as a line-oriented REPL.

Each line is one user intent. Timers are driven between lines: an
interactive shell waits for a pending add before showing the prompt
again, while piped input only fires timers that are already due, so a
burst of ``press`` lines collapses into one add.
"""

from __future__ import annotations

import click
from rich.markup import escape
from rich.text import Text

from todolist import log
from todolist.render import render_prompt_hint, render_view
from todolist.session import Session, TaskRefError
from todolist.tasks.model import FilterMode

HELP_TEXT = """\
Commands:
  add TEXT        type TEXT and press the button
  type [TEXT]     replace the draft (empty clears it)
  press           press the Add/Update button
  edit REF        load a task into the draft for editing
  toggle REF      flip a task's completed state
  rm REF          delete a task
  all             complete all tasks
  clear           delete completed tasks
  filter MODE     all | completed | uncompleted
  list            show the list again
  help            show this help
  quit            leave (drops a pending add)

REF is a position in the shown list or a task id prefix."""


def _needs_ref(name: str, arg: str, session: Session) -> str | None:
    if not arg:
        log.warn(f"'{name}' needs a task reference")
        return None
    try:
        return session.resolve(arg)
    except TaskRefError as exc:
        log.warn(escape(str(exc)))
        return None


def handle_line(session: Session, line: str) -> bool:
    """Apply one shell line. Returns ``False`` when the shell should exit."""
    ctl = session.controller
    name, _, arg = line.strip().partition(" ")
    name = name.lower()
    arg = arg.strip()

    match name:
        case "":
            pass
        case "quit" | "exit":
            return False
        case "help" | "?":
            log.console.print(HELP_TEXT, markup=False)
        case "list" | "ls":
            pass
        case "add":
            ctl.set_draft(arg)
            ctl.press()
        case "type":
            ctl.set_draft(arg)
        case "press":
            ctl.press()
        case "edit":
            task_id = _needs_ref(name, arg, session)
            if task_id:
                ctl.begin_edit(task_id)
        case "toggle":
            task_id = _needs_ref(name, arg, session)
            if task_id:
                ctl.toggle(task_id)
        case "rm" | "delete":
            task_id = _needs_ref(name, arg, session)
            if task_id:
                ctl.delete(task_id)
        case "all":
            ctl.complete_all()
        case "clear":
            ctl.clear_completed()
        case "filter":
            try:
                ctl.set_filter(arg.lower())
            except ValueError:
                allowed = ", ".join(m.value for m in FilterMode)
                log.warn(f"Unknown filter '{escape(arg)}'. Valid filters: {allowed}.")
        case _:
            log.warn(f"Unknown command '{escape(name)}'. Type 'help' for commands.")
    return True


def run_shell(session: Session, *, interactive: bool) -> None:
    ctl = session.controller
    render_view(ctl.view(), log.console)
    if interactive:
        log.console.print("[dim]Type 'help' for commands.[/dim]")

    try:
        while True:
            if interactive:
                log.console.print(Text(render_prompt_hint(ctl.view()), style="dim"))
            try:
                line = click.prompt("todo", default="", show_default=False, prompt_suffix="> ")
            except (click.Abort, EOFError):
                # End of piped input: let pending timers fire before leaving.
                session.loop.run_until_idle()
                render_view(ctl.view(), log.console)
                break

            if not handle_line(session, line):
                break
            if interactive:
                session.loop.run_until_idle()
            else:
                session.loop.run_due()
            if line.strip():
                render_view(ctl.view(), log.console)
    finally:
        session.close()
