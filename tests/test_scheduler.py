"""Tests for the asyncio and simulated schedulers."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from resttimer.core.scheduler import AsyncioScheduler, ManualScheduler
from resttimer.core.timer import RestTimer

# ---------------------------------------------------------------------------
# ManualScheduler
# ---------------------------------------------------------------------------


class TestManualScheduler:
    """The simulated clock fires callbacks only when advanced."""

    def test_clock_starts_at_given_time(self) -> None:
        assert ManualScheduler().now() == 0.0
        assert ManualScheduler(start=100.0).now() == 100.0

    def test_nothing_fires_until_advanced(self) -> None:
        scheduler = ManualScheduler()
        calls: list[float] = []
        scheduler.schedule_repeating(1.0, lambda: calls.append(scheduler.now()))
        assert calls == []

    def test_fires_once_per_interval(self) -> None:
        scheduler = ManualScheduler()
        calls: list[float] = []
        scheduler.schedule_repeating(1.0, lambda: calls.append(scheduler.now()))
        scheduler.advance(3)
        assert calls == [1.0, 2.0, 3.0]
        assert scheduler.now() == 3.0

    def test_catches_up_in_due_order(self) -> None:
        scheduler = ManualScheduler()
        calls: list[tuple[str, float]] = []
        scheduler.schedule_repeating(1.0, lambda: calls.append(("a", scheduler.now())))
        scheduler.schedule_repeating(1.5, lambda: calls.append(("b", scheduler.now())))
        scheduler.advance(3)
        assert calls == [("a", 1.0), ("b", 1.5), ("a", 2.0), ("a", 3.0), ("b", 3.0)]

    def test_partial_advance_leaves_clock_between_firings(self) -> None:
        scheduler = ManualScheduler()
        calls: list[float] = []
        scheduler.schedule_repeating(1.0, lambda: calls.append(scheduler.now()))
        scheduler.advance(1.5)
        assert calls == [1.0]
        assert scheduler.now() == 1.5

    def test_cancel_stops_firing(self) -> None:
        scheduler = ManualScheduler()
        calls: list[float] = []
        handle = scheduler.schedule_repeating(1.0, lambda: calls.append(scheduler.now()))
        scheduler.advance(2)
        scheduler.cancel(handle)
        scheduler.advance(5)
        assert calls == [1.0, 2.0]
        assert scheduler.pending() == 0

    def test_cancel_from_inside_callback(self) -> None:
        scheduler = ManualScheduler()
        calls: list[float] = []
        handles: list[int] = []

        def callback() -> None:
            calls.append(scheduler.now())
            scheduler.cancel(handles[0])

        handles.append(scheduler.schedule_repeating(1.0, callback))
        scheduler.advance(5)
        assert calls == [1.0]

    def test_cancel_unknown_handle_is_ignored(self) -> None:
        scheduler = ManualScheduler()
        scheduler.cancel(999)
        assert scheduler.pending() == 0

    def test_pending_counts_live_callbacks(self) -> None:
        scheduler = ManualScheduler()
        first = scheduler.schedule_repeating(1.0, lambda: None)
        scheduler.schedule_repeating(1.0, lambda: None)
        assert scheduler.pending() == 2
        scheduler.cancel(first)
        assert scheduler.pending() == 1

    def test_advance_backwards_raises(self) -> None:
        with pytest.raises(ValueError):
            ManualScheduler().advance(-1)

    def test_non_positive_interval_raises(self) -> None:
        with pytest.raises(ValueError):
            ManualScheduler().schedule_repeating(0, lambda: None)


# ---------------------------------------------------------------------------
# AsyncioScheduler
# ---------------------------------------------------------------------------


class TestAsyncioScheduler:
    """Repeating callbacks on a real event loop."""

    def test_fires_repeatedly_until_cancelled(self) -> None:
        calls: list[float] = []

        async def main() -> int:
            scheduler = AsyncioScheduler()
            handle = scheduler.schedule_repeating(0.01, lambda: calls.append(scheduler.now()))
            await asyncio.sleep(0.1)
            scheduler.cancel(handle)
            fired = len(calls)
            await asyncio.sleep(0.05)
            return fired

        fired = asyncio.run(main())
        assert fired >= 2
        assert len(calls) == fired

    def test_cancel_from_inside_callback(self) -> None:
        calls: list[int] = []

        async def main() -> None:
            scheduler = AsyncioScheduler()
            handles = []

            def callback() -> None:
                calls.append(1)
                scheduler.cancel(handles[0])

            handles.append(scheduler.schedule_repeating(0.01, callback))
            await asyncio.sleep(0.08)

        asyncio.run(main())
        assert calls == [1]

    def test_now_outside_loop_uses_monotonic_clock(self) -> None:
        with patch("resttimer.core.scheduler.time") as mock_time:
            mock_time.monotonic.return_value = 42.0
            assert AsyncioScheduler().now() == 42.0

    def test_scheduling_outside_loop_raises(self) -> None:
        with pytest.raises(RuntimeError):
            AsyncioScheduler().schedule_repeating(1.0, lambda: None)

    def test_non_positive_interval_raises(self) -> None:
        with pytest.raises(ValueError):
            AsyncioScheduler().schedule_repeating(0, lambda: None)

    def test_drives_a_rest_timer_to_completion(self) -> None:
        ticks: list[int] = []
        completions: list[bool] = []

        async def main() -> None:
            done = asyncio.Event()

            def complete() -> None:
                completions.append(True)
                done.set()

            timer = RestTimer(1, ticks.append, complete)
            timer.start()
            await asyncio.wait_for(done.wait(), timeout=5)
            assert timer.is_running() is False

        asyncio.run(main())
        assert ticks[0] == 1
        assert ticks[-1] == 0
        assert completions == [True]

    def test_same_timer_runs_under_two_loops(self) -> None:
        ticks: list[int] = []
        completions: list[int] = []
        timer = RestTimer(1, ticks.append, lambda: completions.append(1))

        async def run_once() -> None:
            timer.reset()
            timer.start()
            while timer.is_running():
                await asyncio.sleep(0.05)

        asyncio.run(asyncio.wait_for(run_once(), timeout=5))
        asyncio.run(asyncio.wait_for(run_once(), timeout=5))
        assert completions == [1, 1]
        assert ticks[-1] == 0
