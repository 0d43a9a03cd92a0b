from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass

from marbles.observability import get_observability
from streams.subscription import Subscription


class SchedulingOverflowError(RuntimeError):
    """Raised when a flush would run past the configured maximum virtual time."""


@dataclass(eq=False)
class ScheduledTask:
    virtual_time: int
    sequence: int
    action: Callable[[], None]
    owner_id: int | None = None
    cancelled: bool = False
    executed: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.executed)


class VirtualClock:
    """Discrete-event clock: tasks run in (virtual_time, sequence) order.

    Time only moves when advance_to, advance_by or flush is called, so a
    thousand-frame wait costs nothing in wall time.
    """

    def __init__(self, *, max_frames: int | None = None) -> None:
        if max_frames is not None and max_frames < 0:
            raise ValueError("max_frames must be >= 0")
        self.max_frames = max_frames
        self._now = 0
        self._sequence = itertools.count()
        self._queue: list[tuple[int, int, ScheduledTask]] = []
        self._by_owner: dict[int, list[ScheduledTask]] = {}
        self._advancing = False
        self._executed = 0

    def now(self) -> int:
        return self._now

    def schedule(
        self, delay: int, action: Callable[[], None], owner: Subscription | None = None
    ) -> ScheduledTask:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        return self.schedule_at(self._now + delay, action, owner=owner)

    def schedule_at(
        self, virtual_time: int, action: Callable[[], None], owner: Subscription | None = None
    ) -> ScheduledTask:
        if virtual_time < self._now:
            raise ValueError("cannot schedule in the past")
        sequence = next(self._sequence)
        if owner is not None and owner.closed:
            return ScheduledTask(virtual_time, sequence, action, owner.id, cancelled=True)
        owner_id = owner.id if owner is not None else None
        task = ScheduledTask(virtual_time, sequence, action, owner_id)
        heapq.heappush(self._queue, (virtual_time, sequence, task))
        if owner is not None:
            self._link_owner(owner).append(task)
        return task

    def cancel(self, task: object) -> bool:
        if not isinstance(task, ScheduledTask) or not task.pending:
            return False
        task.cancelled = True
        self._detach(task)
        return True

    def cancel_owner(self, owner_id: int) -> int:
        tasks = self._by_owner.pop(owner_id, [])
        cancelled = 0
        for task in tasks:
            if task.pending:
                task.cancelled = True
                cancelled += 1
        return cancelled

    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if task.pending)

    def owner_count(self) -> int:
        return len(self._by_owner)

    def advance_by(self, frames: int) -> None:
        if frames < 0:
            raise ValueError("frames must be >= 0")
        self.advance_to(self._now + frames)

    def advance_to(self, virtual_time: int) -> None:
        if self._advancing:
            raise RuntimeError("clock is already advancing")
        if virtual_time < self._now:
            raise ValueError("virtual time must not move backwards")
        self._advancing = True
        try:
            while self._queue and self._queue[0][0] <= virtual_time:
                _, _, task = heapq.heappop(self._queue)
                if not task.pending:
                    continue
                self._now = task.virtual_time
                self._run(task)
            self._now = virtual_time
        finally:
            self._advancing = False

    def flush(self) -> None:
        if self._advancing:
            raise RuntimeError("clock is already advancing")
        observability = get_observability()
        executed_before = self._executed
        while True:
            self._drop_inactive_head()
            if not self._queue:
                break
            next_time = self._queue[0][0]
            if self.max_frames is not None and next_time > self.max_frames:
                observability.log_overflow(
                    now=self._now, next_time=next_time, max_frames=self.max_frames
                )
                raise SchedulingOverflowError(
                    f"next task at frame {next_time} exceeds max_frames={self.max_frames}"
                )
            self.advance_to(next_time)
        observability.record_pending(self.pending_count())
        observability.log_flushed(now=self._now, tasks_executed=self._executed - executed_before)

    def _run(self, task: ScheduledTask) -> None:
        task.executed = True
        self._detach(task)
        self._executed += 1
        get_observability().record_task_executed()
        task.action()

    def _link_owner(self, owner: Subscription) -> list[ScheduledTask]:
        tasks = self._by_owner.get(owner.id)
        if tasks is None:
            tasks = self._by_owner[owner.id] = []
            owner_id = owner.id
            owner.add(lambda: self.cancel_owner(owner_id))
        return tasks

    def _detach(self, task: ScheduledTask) -> None:
        if task.owner_id is None:
            return
        tasks = self._by_owner.get(task.owner_id)
        if tasks is not None and task in tasks:
            tasks.remove(task)
            if not tasks:
                del self._by_owner[task.owner_id]

    def _drop_inactive_head(self) -> None:
        while self._queue and not self._queue[0][2].pending:
            heapq.heappop(self._queue)
