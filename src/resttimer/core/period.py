"""Rest period: owns a rest timer for the length of one rest between sets."""

from __future__ import annotations

import logging
from typing import Any, Callable

from resttimer.core.scheduler import Scheduler
from resttimer.core.timer import (
    DEFAULT_REST_SECONDS,
    InvalidStateError,
    RestTimer,
    format_time,
    get_rest_time_recommendation,
)

logger = logging.getLogger(__name__)

_ALMOST_READY_SECONDS = 10
_GET_READY_SECONDS = 30


class RestPeriod:
    """Controls one rest period between sets.

    Controls that make no sense in the current state raise
    :class:`InvalidStateError`.  The period must be closed (or used as a
    context manager) so its timer stops ticking when the rest is over.
    """

    ADJUSTMENTS = (-15, -30, 30, 60)

    def __init__(
        self,
        duration: int = DEFAULT_REST_SECONDS,
        on_complete: Callable[[], None] | None = None,
        on_skip: Callable[[], None] | None = None,
        on_tick: Callable[[int], None] | None = None,
        on_alert: Callable[[], None] | None = None,
        scheduler: Scheduler | None = None,
        sound_enabled: bool = True,
        auto_start: bool = False,
    ) -> None:
        self._on_complete = on_complete
        self._on_skip = on_skip
        self._on_tick = on_tick
        self._on_alert = on_alert
        self.sound_enabled = sound_enabled
        self._completed = False
        self._timer = RestTimer(duration, self._handle_tick, self._handle_complete, scheduler)
        if auto_start:
            self.start()

    @classmethod
    def for_exercise(cls, exercise_type: str, intensity: str, **kwargs: Any) -> RestPeriod:
        """Build a period lasting the recommended rest for the exercise."""
        return cls(get_rest_time_recommendation(exercise_type, intensity), **kwargs)

    def __enter__(self) -> RestPeriod:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- state ---------------------------------------------------------------

    @property
    def duration(self) -> int:
        return self._timer.duration

    @property
    def remaining_time(self) -> int:
        return self._timer.get_remaining_time()

    @property
    def state(self) -> str:
        """One of ``idle``, ``running``, ``paused`` or ``complete``."""
        if self._completed:
            return "complete"
        if self._timer.is_paused():
            return "paused"
        if self._timer.is_running():
            return "running"
        return "idle"

    # -- controls ------------------------------------------------------------

    def start(self) -> None:
        self._require_state("start", frozenset({"idle", "complete"}))
        if self._completed:
            self._completed = False
            self._timer.reset()
        self._timer.start()

    def pause(self) -> None:
        self._require_state("pause", frozenset({"running"}))
        self._timer.pause()

    def resume(self) -> None:
        self._require_state("resume", frozenset({"paused"}))
        self._timer.resume()

    def reset(self) -> None:
        """Rewind to the full duration and wait for ``start``."""
        self._completed = False
        self._timer.reset()

    def can_adjust(self, seconds: int) -> bool:
        """Whether *seconds* may be added; removals must leave time on the clock."""
        if self._completed:
            return False
        return seconds >= 0 or self.remaining_time > -seconds

    def adjust(self, seconds: int) -> None:
        self._require_state("adjust", frozenset({"idle", "running", "paused"}))
        if not self.can_adjust(seconds):
            raise InvalidStateError(
                f"cannot remove {-seconds}s with {format_time(self.remaining_time)} remaining"
            )
        self._timer.add_time(seconds)

    def skip(self) -> None:
        """Abandon the rest and move on."""
        self._timer.stop()
        logger.debug("rest skipped with %ss remaining", self.remaining_time)
        if self._on_skip is not None:
            self._on_skip()

    def close(self) -> None:
        self._timer.stop()

    # -- presentation --------------------------------------------------------

    def progress(self) -> float:
        """Return the share of the rest already taken, as a percentage."""
        return (self.duration - self.remaining_time) / self.duration * 100

    def message(self) -> str:
        if 0 < self.remaining_time <= _ALMOST_READY_SECONDS:
            return "Almost ready!"
        return "Take your rest"

    def tip(self) -> str | None:
        if 0 < self.remaining_time <= _GET_READY_SECONDS:
            return "Get ready for your next set!"
        return None

    def status(self) -> str:
        state = self.state
        if state == "complete":
            return "Rest complete"
        if state == "paused":
            return f"{format_time(self.remaining_time)} remaining (paused)"
        return f"{format_time(self.remaining_time)} remaining"

    # -- private helpers -----------------------------------------------------

    def _require_state(self, method: str, valid: frozenset[str]) -> None:
        state = self.state
        if state not in valid:
            raise InvalidStateError(f"{method}() is not valid from {state} state")

    def _handle_tick(self, remaining: int) -> None:
        if self._on_tick is not None:
            self._on_tick(remaining)

    def _handle_complete(self) -> None:
        self._completed = True
        if self.sound_enabled and self._on_alert is not None:
            self._on_alert()
        if self._on_complete is not None:
            self._on_complete()
