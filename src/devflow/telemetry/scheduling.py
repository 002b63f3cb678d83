"""Clocks and timer scheduling for the telemetry engine.

The engine never reads wall time or starts threads directly. It takes a
clock (a zero-argument callable returning seconds) and a Scheduler, so the
same code runs against real time in the host and against virtual time
during replay and in tests.
"""

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TimerHandle(Protocol):
    """A pending callback that can be cancelled before it fires."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules a callback to run once after a delay."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


def monotonic_clock() -> float:
    """Default engine clock."""
    return time.monotonic()


class ThreadingScheduler:
    """Scheduler backed by ``threading.Timer``.

    Timers are daemon threads so a forgotten timer never keeps the
    process alive.
    """

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer


class VirtualClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class _VirtualTimer:
    def __init__(self, deadline: float, callback: Callable[[], None]):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Scheduler driven by a VirtualClock.

    Callbacks run synchronously from ``advance_to`` in deadline order,
    with the clock set to each timer's deadline while it runs.
    """

    def __init__(self, clock: VirtualClock):
        self.clock = clock
        self._queue: list[tuple[float, int, _VirtualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _VirtualTimer(self.clock.now + delay_seconds, callback)
        heapq.heappush(self._queue, (timer.deadline, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of scheduled timers that have neither fired nor been cancelled."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance_to(self, when: float) -> int:
        """Move the clock forward to ``when``, firing every timer due by then.

        Args:
            when: Target time in seconds. Moving backwards is ignored.

        Returns:
            Number of callbacks that fired.
        """
        fired = 0
        while self._queue and self._queue[0][0] <= when:
            deadline, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.clock.now = max(self.clock.now, deadline)
            timer.callback()
            fired += 1
        self.clock.now = max(self.clock.now, when)
        return fired

    def advance(self, seconds: float) -> int:
        """Advance the clock by ``seconds``; see advance_to."""
        return self.advance_to(self.clock.now + seconds)
