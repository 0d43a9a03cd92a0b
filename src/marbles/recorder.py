from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from marbles.contracts import Notification
from marbles.clock import VirtualClock


@dataclass
class NotificationRecorder:
    """Observer that stamps every signal with the clock's current frame."""

    clock: VirtualClock
    records: list[Notification]

    def __init__(self, clock: VirtualClock) -> None:
        self.clock = clock
        self.records = []

    def next(self, value: Any) -> None:
        self.records.append(Notification.next(self.clock.now(), value))

    def error(self, err: Any) -> None:
        self.records.append(Notification.error(self.clock.now(), err))

    def complete(self) -> None:
        self.records.append(Notification.complete(self.clock.now()))

    def all_records(self) -> Iterable[Notification]:
        return tuple(self.records)

    def values(self) -> list[Any]:
        return [record.value for record in self.records if not record.terminal]
