"""Trailing-edge debounce on top of :class:`todolist.timers.EventLoop`."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from todolist.timers import EventLoop, TimerHandle


class Debouncer:
    """Collapse bursts of calls into one call after *wait* seconds of quiet.

    Each call restarts the quiet period and replaces the arguments, so the
    function eventually runs once with the arguments of the last call.
    The leading edge is suppressed.
    """

    def __init__(self, func: Callable[..., Any], wait: float, loop: EventLoop) -> None:
        self._func = func
        self._wait = wait
        self._loop = loop
        self._handle: TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._args = args
        self._kwargs = kwargs
        self._handle = self._loop.call_later(self._wait, self._fire)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
        self._reset()

    def flush(self) -> Any:
        """Run the pending call now instead of waiting. No-op when idle."""
        if self._handle is None:
            return None
        self._handle.cancel()
        return self._fire()

    def _reset(self) -> None:
        self._handle = None
        self._args = ()
        self._kwargs = {}

    def _fire(self) -> Any:
        args, kwargs = self._args, self._kwargs
        # Clear first: the callee may call or cancel us again.
        self._reset()
        return self._func(*args, **kwargs)
