"""Rest timer core: a one-second countdown between sets.

The remaining time is always recomputed from the clock reading taken at
``start()``, never decremented per tick, so late or coalesced firings from
the host loop cannot make the countdown drift.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from resttimer.core.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0

DEFAULT_REST_SECONDS = 120

# Recommended rest between sets, in seconds.
REST_TIME_RECOMMENDATIONS: dict[str, dict[str, int]] = {
    "strength": {"light": 60, "moderate": 120, "heavy": 180},
    "cardio": {"light": 30, "moderate": 60, "heavy": 90},
    "flexibility": {"light": 15, "moderate": 30, "heavy": 45},
}

INTENSITIES = ("light", "moderate", "heavy")


class ConfigurationError(ValueError):
    """Raised when a timer is given a duration it cannot count down."""


class InvalidStateError(Exception):
    """Raised when a control is used in a state that does not offer it."""


def _check_duration(duration: int) -> int:
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise TypeError(f"duration must be an integer, got {type(duration).__name__}")
    if duration <= 0:
        raise ConfigurationError(f"duration must be positive, got {duration}")
    return duration


class RestTimer:
    """Count down *duration* seconds, reporting every second.

    *on_tick* receives the remaining whole seconds on every firing and once,
    synchronously, on ``start``, ``reset`` and ``add_time``.  *on_complete*
    is called exactly once when the countdown reaches zero.

    The owner must call :meth:`stop` when done with the timer, or use it as
    a context manager::

        with RestTimer(90, show, done) as timer:
            timer.start()
            ...
    """

    def __init__(
        self,
        duration: int,
        on_tick: Callable[[int], None],
        on_complete: Callable[[], None],
        scheduler: Scheduler | None = None,
    ) -> None:
        self._duration: int = _check_duration(duration)
        self._remaining_time: int = duration
        self._on_tick = on_tick
        self._on_complete = on_complete
        self._scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._handle: object | None = None
        self._start_time: float = 0.0
        self._paused: bool = False

    def __enter__(self) -> RestTimer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -- public interface ----------------------------------------------------

    @property
    def duration(self) -> int:
        return self._duration

    def start(self) -> None:
        """Start (or restart) the countdown and report the current value."""
        if self._handle is not None:
            self.stop()

        self._start_time = self._scheduler.now()
        self._paused = False
        self._handle = self._scheduler.schedule_repeating(TICK_INTERVAL, self._on_interval)
        logger.debug("rest timer started: %ss of %ss", self._remaining_time, self._duration)

        self._on_tick(self._remaining_time)

    def pause(self) -> None:
        """Suspend ticking.  The repeating callback keeps firing as a no-op."""
        self._paused = True
        logger.debug("rest timer paused at %ss", self._remaining_time)

    def resume(self) -> None:
        """Continue a paused countdown from where it stopped."""
        if not self._paused:
            return
        consumed = self._duration - self._remaining_time
        self._start_time = self._scheduler.now() - consumed
        self._paused = False
        logger.debug("rest timer resumed at %ss", self._remaining_time)

    def stop(self) -> None:
        """Cancel ticking.  Safe to call when nothing is scheduled."""
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None
            logger.debug("rest timer stopped at %ss", self._remaining_time)
        self._paused = False

    def reset(self, new_duration: int | None = None) -> None:
        """Stop and rewind to the full duration, optionally a new one."""
        self.stop()
        if new_duration is not None:
            self._duration = _check_duration(new_duration)
        self._remaining_time = self._duration
        logger.debug("rest timer reset to %ss", self._duration)
        self._on_tick(self._remaining_time)

    def add_time(self, seconds: int) -> None:
        """Lengthen (or, with a negative value, shorten) the countdown.

        The remaining time stops at zero and the duration at one second.
        """
        self._duration = max(1, self._duration + seconds)
        self._remaining_time = max(0, self._remaining_time + seconds)
        self._on_tick(self._remaining_time)

    def get_remaining_time(self) -> int:
        return self._remaining_time

    def is_running(self) -> bool:
        return self._handle is not None and not self._paused

    def is_paused(self) -> bool:
        return self._paused

    # -- private helpers -----------------------------------------------------

    def _on_interval(self) -> None:
        if self._paused:
            return

        elapsed = math.floor(self._scheduler.now() - self._start_time)
        self._remaining_time = max(0, self._duration - elapsed)
        self._on_tick(self._remaining_time)

        if self._remaining_time <= 0:
            self.stop()
            logger.debug("rest timer complete")
            self._on_complete()


def format_time(seconds: int) -> str:
    """Format *seconds* as ``M:SS``."""
    if seconds < 0:
        raise ValueError(f"seconds must not be negative, got {seconds}")
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def get_rest_time_recommendation(exercise_type: str, intensity: str) -> int:
    """Return the recommended rest in seconds for a set of *exercise_type*.

    Unknown exercise types and intensities fall back to
    :data:`DEFAULT_REST_SECONDS`.
    """
    return REST_TIME_RECOMMENDATIONS.get(exercise_type, {}).get(intensity, DEFAULT_REST_SECONDS)
