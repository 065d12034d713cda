"""Transient user notifications: console toasts plus optional desktop popups."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from todolist import log


class Level(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: Level
    message: str


Sink = Callable[[Notice], None]


def _run_quiet(*cmd: str) -> None:
    """Fire-and-forget subprocess, ignore failures."""
    try:
        subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except (FileNotFoundError, OSError):
        pass


def console_sink(notice: Notice) -> None:
    if notice.level is Level.ERROR:
        log.error(notice.message)
    else:
        log.success(notice.message)


def desktop_sink(notice: Notice) -> None:
    """Show a desktop toast, best-effort."""
    title = "Todo List - Error" if notice.level is Level.ERROR else "Todo List"
    if sys.platform == "darwin":
        _run_quiet(
            "osascript", "-e",
            f'display notification "{notice.message}" with title "{title}"',
        )
    elif sys.platform.startswith("linux"):
        urgency = "critical" if notice.level is Level.ERROR else "normal"
        _run_quiet("notify-send", "-u", urgency, title, notice.message)
    elif sys.platform == "win32":
        sound = "Hand" if notice.level is Level.ERROR else "Asterisk"
        _run_quiet(
            "powershell.exe", "-Command",
            f"[System.Media.SystemSounds]::{sound}.Play()",
        )


class Notifier:
    """Dispatch notices to every sink. Sinks carry nothing back to the caller."""

    def __init__(self, sinks: list[Sink] | None = None) -> None:
        self._sinks: list[Sink] = list(sinks) if sinks is not None else [console_sink]

    @classmethod
    def for_console(cls, *, desktop: bool = False) -> Notifier:
        sinks: list[Sink] = [console_sink]
        if desktop:
            sinks.append(desktop_sink)
        return cls(sinks)

    def add_sink(self, sink: Sink) -> None:
        self._sinks.append(sink)

    def success(self, message: str) -> None:
        self._emit(Notice(Level.SUCCESS, message))

    def error(self, message: str) -> None:
        self._emit(Notice(Level.ERROR, message))

    def _emit(self, notice: Notice) -> None:
        for sink in self._sinks:
            sink(notice)
