"""Tests for deferred task scheduling."""

import asyncio

import pytest

from mathmatch.game.scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    """Tests for ManualScheduler."""

    def test_runs_only_when_due(self):
        """Test that tasks wait for the clock."""
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(2.0, calls.append, "a")

        assert scheduler.advance(1.0) == 0
        assert calls == []
        assert scheduler.advance(1.0) == 1
        assert calls == ["a"]
        assert scheduler.now == 2.0

    def test_deadline_order(self):
        """Test that tasks run by deadline, ties in scheduling order."""
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(3, calls.append, "late")
        scheduler.call_later(1, calls.append, "first")
        scheduler.call_later(1, calls.append, "second")

        scheduler.advance(5)
        assert calls == ["first", "second", "late"]

    def test_nested_scheduling_within_window(self):
        """Test that tasks scheduled by callbacks run if they fall in the window."""
        scheduler = ManualScheduler()
        calls = []

        def outer():
            calls.append(("outer", scheduler.now))
            scheduler.call_later(1, lambda: calls.append(("inner", scheduler.now)))

        scheduler.call_later(1, outer)
        scheduler.advance(5)

        assert calls == [("outer", 1), ("inner", 2)]

    def test_cancel(self):
        """Test that cancelled tasks never run."""
        scheduler = ManualScheduler()
        calls = []
        task = scheduler.call_later(1, calls.append, "x")

        assert scheduler.pending == 1
        task.cancel()
        assert task.cancelled
        assert scheduler.pending == 0
        assert scheduler.next_deadline() is None

        scheduler.advance(2)
        assert calls == []

    def test_run_pending_zero_delay(self):
        """Test that zero-delay tasks run without moving the clock."""
        scheduler = ManualScheduler(start=10.0)
        calls = []
        task = scheduler.call_later(0, calls.append, 1)

        assert scheduler.run_pending() == 1
        assert calls == [1]
        assert task.done
        assert scheduler.now == 10.0

    def test_negative_advance(self):
        """Test that the clock cannot go backwards."""
        with pytest.raises(ValueError):
            ManualScheduler().advance(-1)


class TestAsyncioScheduler:
    """Tests for AsyncioScheduler."""

    def test_runs_on_loop(self):
        """Test that callbacks run on the event loop."""
        calls = []

        async def scenario():
            scheduler = AsyncioScheduler()
            scheduler.call_later(0.01, calls.append, "ran")
            cancelled = scheduler.call_later(0.01, calls.append, "cancelled")
            cancelled.cancel()
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert calls == ["ran"]
