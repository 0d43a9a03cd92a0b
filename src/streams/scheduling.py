from __future__ import annotations

import sched
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

from streams.subscription import Subscription

ClockSeconds = Callable[[], float]


class Scheduler(Protocol):
    def now(self) -> int: ...

    def schedule(
        self, delay: int, action: Callable[[], None], owner: Subscription | None = None
    ) -> object: ...

    def cancel(self, task: object) -> bool: ...


class RealTimeScheduler:
    """Wall-clock scheduler on top of the stdlib event scheduler.

    Single-threaded: nothing fires until run() is called, which sleeps
    between due actions and returns once the queue is empty.
    """

    def __init__(
        self,
        *,
        frame_ms: int = 1,
        clock: ClockSeconds = time.monotonic,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        if frame_ms <= 0:
            raise ValueError("frame_ms must be > 0")
        self._frame_ms = frame_ms
        self._clock = clock
        self._origin = clock()
        self._queue = sched.scheduler(clock, sleep)

    def now(self) -> int:
        return int((self._clock() - self._origin) * 1000 / self._frame_ms)

    def schedule(
        self, delay: int, action: Callable[[], None], owner: Subscription | None = None
    ) -> sched.Event | None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        if owner is not None and owner.closed:
            return None
        event = self._queue.enter(delay * self._frame_ms / 1000, 0, action)
        if owner is not None:
            owner.add(lambda: self.cancel(event))
        return event

    def cancel(self, task: object) -> bool:
        try:
            self._queue.cancel(task)  # type: ignore[arg-type]
        except ValueError:
            return False
        return True

    def pending_count(self) -> int:
        return len(self._queue.queue)

    def run(self) -> None:
        self._queue.run()


_DEFAULT_SCHEDULER: Scheduler = RealTimeScheduler()


def set_default_scheduler(scheduler: Scheduler) -> None:
    global _DEFAULT_SCHEDULER
    _DEFAULT_SCHEDULER = scheduler


def get_default_scheduler() -> Scheduler:
    return _DEFAULT_SCHEDULER


@contextmanager
def use_scheduler(scheduler: Scheduler) -> Iterator[Scheduler]:
    previous = get_default_scheduler()
    set_default_scheduler(scheduler)
    try:
        yield scheduler
    finally:
        set_default_scheduler(previous)
