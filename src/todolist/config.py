"""Configuration defaults, env vars, and runtime options for todolist."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from todolist import __version__

VERSION = __version__

STORAGE_KEY = "todos"

DEFAULT_STORAGE_PATH = Path.home() / ".todolist" / "storage.json"
DEFAULT_DEBOUNCE_MS = 500
# Roughly what browsers grant a single origin for local storage.
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Runtime configuration. Empty / negative fields are resolved from env vars."""

    # Storage
    storage_path: str = ""
    storage_key: str = STORAGE_KEY
    quota_bytes: int = DEFAULT_QUOTA_BYTES

    # Controller
    debounce_ms: int = -1

    # Notifications
    desktop_notifications: bool | None = None

    # Misc
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.storage_path:
            self.storage_path = (
                os.environ.get("TODOLIST_STORAGE_PATH")
                or str(DEFAULT_STORAGE_PATH)
            )
        if self.debounce_ms < 0:
            self.debounce_ms = max(0, _env_int("TODOLIST_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS))
        if self.desktop_notifications is None:
            self.desktop_notifications = _env_bool("TODOLIST_DESKTOP_NOTIFY", False)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def storage_file(self) -> Path:
        return Path(self.storage_path).expanduser()
