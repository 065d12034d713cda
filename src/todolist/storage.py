"""Key-value storage backends with a browser-local-storage style API.

Values are strings. Every ``set_item`` rewrites the whole backing store,
and a byte quota bounds its total size.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from todolist import log
from todolist.config import DEFAULT_QUOTA_BYTES
from todolist.errors import StorageWriteError

PathLike = Path | str


class KeyValueStorage(ABC):
    """Base class: quota accounting over a ``dict[str, str]`` snapshot."""

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES) -> None:
        self.quota_bytes = quota_bytes

    # ── backend hooks ────────────────────────────────────────────

    @abstractmethod
    def _read_all(self) -> dict[str, str]:
        """Return every stored key and value."""
        ...

    @abstractmethod
    def _write_all(self, items: dict[str, str]) -> None:
        """Replace the whole backing store with *items*."""
        ...

    # ── public API ───────────────────────────────────────────────

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        used = _size_of(items)
        if self.quota_bytes and used > self.quota_bytes:
            raise StorageWriteError(
                f"storage quota exceeded ({used} > {self.quota_bytes} bytes)"
            )
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    def keys(self) -> list[str]:
        return list(self._read_all())


def _size_of(items: dict[str, str]) -> int:
    # UTF-16 code units, as browsers count local storage usage.
    return sum(len(k.encode("utf-16-le")) + len(v.encode("utf-16-le")) for k, v in items.items())


class MemoryStorage(KeyValueStorage):
    """Process-local storage; nothing survives the session."""

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
    ) -> None:
        super().__init__(quota_bytes)
        self._items: dict[str, str] = dict(initial or {})

    def _read_all(self) -> dict[str, str]:
        return dict(self._items)

    def _write_all(self, items: dict[str, str]) -> None:
        self._items = dict(items)


class FileStorage(KeyValueStorage):
    """JSON-object file on disk, replaced atomically on every write."""

    def __init__(self, path: PathLike, quota_bytes: int = DEFAULT_QUOTA_BYTES) -> None:
        super().__init__(quota_bytes)
        self.path = path if isinstance(path, Path) else Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            self._quarantine(f"not UTF-8 ({exc.reason})")
            return {}
        except OSError as exc:
            log.warn(f"Ignoring unreadable storage file {self.path}: {exc}")
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            self._quarantine(f"invalid JSON ({exc})")
            return {}
        if not isinstance(data, dict):
            self._quarantine("expected a JSON object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.corrupt")

    def _quarantine(self, reason: str) -> None:
        """Move a corrupt file aside so the next write cannot destroy it."""
        try:
            os.replace(self.path, self.corrupt_path)
        except OSError as exc:
            log.warn(f"Ignoring corrupt storage file {self.path} ({reason}); cannot move it aside: {exc}")
            return
        log.warn(f"Storage file {self.path} is corrupt ({reason}); moved to {self.corrupt_path}")

    def _write_all(self, items: dict[str, str]) -> None:
        payload = json.dumps(items, ensure_ascii=False, indent=2)
        tmp_name = ""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            # os.replace overwrites the destination (required on Windows)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"cannot write {self.path}: {exc}") from exc
        log.debug(f"Wrote {len(items)} key(s) to {self.path}")
