"""Single-shot cancellable timers for the type-ahead reset."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol


class Timer(Protocol):
    def stop(self) -> None: ...


class Scheduler(Protocol):
    """Schedules deferred callbacks. Any Textual widget or app satisfies it.

    Schedulers that are not driven by an event loop also provide
    ``run_due()``, which the engine polls before handling each event.
    """

    def set_timer(self, delay: float, callback: Callable[[], None]) -> Timer: ...


class CooperativeTimer:
    """A pending callback owned by a CooperativeScheduler."""

    __slots__ = ("deadline", "callback", "active")

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.active = True

    def stop(self) -> None:
        self.active = False


class CooperativeScheduler:
    """Fires due timers when polled, for headless single-threaded use.

    The engine polls at the start of every event, so an expired timer always
    runs before the next keystroke is interpreted.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._timers: list[CooperativeTimer] = []

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if t.active)

    def set_timer(self, delay: float, callback: Callable[[], None]) -> CooperativeTimer:
        timer = CooperativeTimer(self._clock() + delay, callback)
        self._timers.append(timer)
        return timer

    def run_due(self) -> None:
        now = self._clock()
        due = [t for t in self._timers if t.active and t.deadline <= now]
        self._timers = [t for t in self._timers if t.active and t.deadline > now]
        for timer in sorted(due, key=lambda t: t.deadline):
            if timer.active:
                timer.active = False
                timer.callback()


class ManualClock:
    """A clock that only moves when told to. Times are in seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
