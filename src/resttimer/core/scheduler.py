"""Schedulers: the host capability a rest timer ticks against.

A scheduler supplies a monotonic clock and repeating, cancelable callbacks.
``AsyncioScheduler`` runs on a real event loop; ``ManualScheduler`` is a
simulated clock that only moves when told to, for deterministic tests.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """What a ``RestTimer`` needs from its host."""

    def now(self) -> float:
        """Return a monotonic clock reading in seconds."""

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> Any:
        """Run *callback* every *interval* seconds; return a cancel handle."""

    def cancel(self, handle: Any) -> None:
        """Cancel a repeating callback.  Unknown or spent handles are ignored."""


# ---------------------------------------------------------------------------
# asyncio
# ---------------------------------------------------------------------------


class _RepeatingCall:
    """A fixed-rate repeating callback anchored to the moment it was created.

    Firings land on ``anchor + n * interval``.  When the loop falls behind,
    missed slots are skipped rather than replayed in a burst.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._anchor = loop.time()
        self._count = 0
        self._handle: asyncio.TimerHandle | None = None
        self.cancelled = False
        self._schedule_next()

    def _schedule_next(self) -> None:
        behind = math.floor((self._loop.time() - self._anchor) / self._interval)
        self._count = max(self._count + 1, behind + 1)
        self._handle = self._loop.call_at(
            self._anchor + self._count * self._interval, self._fire
        )

    def _fire(self) -> None:
        if self.cancelled:
            return
        # Re-arm first so the callback is free to cancel us.
        self._schedule_next()
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler:
    """Schedule repeating callbacks on an asyncio event loop.

    If no *loop* is given, every call uses whichever loop is running at the
    time, so one scheduler can be built outside any loop and reused across
    several ``asyncio.run`` calls.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def now(self) -> float:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return time.monotonic()
        return loop.time()

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> _RepeatingCall:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        logger.debug("scheduling repeating callback every %ss", interval)
        return _RepeatingCall(loop, interval, callback)

    def cancel(self, handle: _RepeatingCall) -> None:
        handle.cancel()


# ---------------------------------------------------------------------------
# Simulated clock
# ---------------------------------------------------------------------------


@dataclass
class _Job:
    due: float
    interval: float
    callback: Callable[[], None]


class ManualScheduler:
    """A simulated clock for driving timers without real delays.

    Time stands still until :meth:`advance` is called, which runs every
    callback falling due inside the window in due-time order.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._jobs: dict[int, _Job] = {}
        self._ids = itertools.count(1)

    def now(self) -> float:
        return self._now

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> int:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        handle = next(self._ids)
        self._jobs[handle] = _Job(self._now + interval, interval, callback)
        return handle

    def cancel(self, handle: int) -> None:
        self._jobs.pop(handle, None)

    def pending(self) -> int:
        """Return the number of live repeating callbacks."""
        return len(self._jobs)

    def advance(self, seconds: float) -> None:
        """Move the clock forward by *seconds*, firing whatever falls due."""
        if seconds < 0:
            raise ValueError(f"cannot move the clock backwards ({seconds})")
        target = self._now + seconds
        while True:
            due = [(job.due, handle) for handle, job in self._jobs.items() if job.due <= target]
            if not due:
                break
            when, handle = min(due)
            job = self._jobs[handle]
            self._now = when
            job.due = when + job.interval
            job.callback()
        self._now = target
