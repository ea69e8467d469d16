"""Deferred callbacks for the single-threaded engine."""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle to a callback scheduled for later."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]):
        self.when = when
        self._callback = callback
        self._args = args
        self._cancelled = False
        self._done = False
        self._on_cancel: Callable[[], None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        """Check if the callback already ran."""
        return self._done

    def cancel(self) -> None:
        """Prevent the callback from running. No-op if it already ran."""
        if self._done or self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel:
            self._on_cancel()

    def run(self) -> None:
        if self._cancelled or self._done:
            return
        self._done = True
        self._callback(*self._args)

    def __repr__(self) -> str:
        name = getattr(self._callback, "__name__", repr(self._callback))
        return f"ScheduledTask(when={self.when:.3f}, callback={name}, cancelled={self._cancelled})"


class Scheduler(ABC):
    """Schedules callbacks to run after a delay, on the caller's thread."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        """Run `callback(*args)` after `delay` seconds."""


class ManualScheduler(Scheduler):
    """Scheduler driven by an explicit virtual clock.

    Nothing runs until `advance()` or `run_pending()` is called. Tasks fire
    in deadline order; tasks with equal deadlines fire in scheduling order.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of tasks that have neither run nor been cancelled."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        task = ScheduledTask(self._now + max(delay, 0.0), callback, args)
        heapq.heappush(self._queue, (task.when, next(self._counter), task))
        return task

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every task that became due.

        Tasks scheduled by callbacks during the advance also run if they
        fall inside the window.

        Returns:
            Number of callbacks run.
        """
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, task = heapq.heappop(self._queue)
            self._now = max(self._now, when)
            if task.cancelled:
                continue
            task.run()
            ran += 1
        self._now = target
        return ran

    def run_pending(self) -> int:
        """Run every task that is already due without moving the clock."""
        return self.advance(0.0)

    def next_deadline(self) -> float | None:
        """Get the time of the earliest live task, if any."""
        live = [when for when, _, task in self._queue if not task.cancelled]
        return min(live) if live else None


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        task = ScheduledTask(self.loop.time() + max(delay, 0.0), callback, args)
        handle = self.loop.call_later(max(delay, 0.0), task.run)
        task._on_cancel = handle.cancel
        logger.debug(f"Scheduled {task!r}")
        return task
