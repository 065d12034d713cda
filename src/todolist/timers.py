"""Single-threaded timer loop with cancelable handles.

Callbacks never run on their own: the owner of the loop drives it with
:meth:`EventLoop.run_due` (fire whatever is due now) or
:meth:`EventLoop.run_until_idle` (sleep until every pending timer fired).
"""

from __future__ import annotations

import heapq
import itertools
import time
from collections.abc import Callable
from typing import Any

from todolist import log


class TimerHandle:
    """A scheduled callback. ``cancel()`` is idempotent."""

    __slots__ = ("when", "_callback", "_args", "_cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._callback = None  # type: ignore[assignment]
        self._args = ()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        if not self._cancelled:
            self._callback(*self._args)


class EventLoop:
    """Timer queue on a monotonic clock.

    Usage::

        loop = EventLoop()
        handle = loop.call_later(0.5, fire)   # schedule
        handle.cancel()                       # forget it
        loop.run_due()                        # run callbacks whose time has come
        loop.run_until_idle()                 # sleep/run until nothing is pending
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._clock()

    # ── scheduling ───────────────────────────────────────────────

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        when = self._clock() + max(0.0, delay)
        handle = TimerHandle(when, callback, args)
        heapq.heappush(self._queue, (when, next(self._seq), handle))
        return handle

    def _prune(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def next_deadline(self) -> float | None:
        self._prune()
        return self._queue[0][0] if self._queue else None

    # ── driving ──────────────────────────────────────────────────

    def run_due(self) -> int:
        """Run every callback whose deadline has passed. Returns how many ran."""
        ran = 0
        now = self._clock()
        while True:
            self._prune()
            if not self._queue or self._queue[0][0] > now:
                return ran
            _, _, handle = heapq.heappop(self._queue)
            handle._run()
            ran += 1

    def run_until_idle(self) -> int:
        """Sleep until each pending timer is due and run it, until none remain."""
        ran = 0
        while True:
            deadline = self.next_deadline()
            if deadline is None:
                return ran
            wait = deadline - self._clock()
            if wait > 0:
                log.debug(f"Waiting {wait:.3f}s for pending timers")
                self._sleep(wait)
            ran += self.run_due()
