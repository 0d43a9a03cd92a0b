from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from streams.observability import get_observability
from streams.stream import Stream
from streams.subscriber import Subscriber

T = TypeVar("T")


class Broadcaster(Stream[T]):
    """Multicast node: a Stream to subscribe to and an Observer to push into.

    Dispatch iterates over a snapshot so subscribers added or cancelled
    during delivery do not disturb the current pass. A failing callback does
    not stop the pass: a single failure is re-raised as is once every
    subscriber was reached, several are wrapped in DispatchError. Nothing is
    replayed.
    """

    def __init__(self) -> None:
        super().__init__(self._register)
        self._subscribers: list[Subscriber[T]] = []
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def observer_count(self) -> int:
        return len(self._subscribers)

    def next(self, value: T) -> None:
        if self._stopped:
            return
        _dispatch(tuple(self._subscribers), lambda subscriber: subscriber.next(value))

    def error(self, err: Any) -> None:
        if self._stopped:
            return
        _dispatch(self._terminate("error"), lambda subscriber: subscriber.error(err))

    def complete(self) -> None:
        if self._stopped:
            return
        _dispatch(self._terminate("complete"), lambda subscriber: subscriber.complete())

    def _terminate(self, kind: str) -> tuple[Subscriber[T], ...]:
        self._stopped = True
        snapshot = tuple(self._subscribers)
        self._subscribers.clear()
        get_observability().log_broadcast_terminated(kind=kind, subscriber_count=len(snapshot))
        return snapshot

    def _register(self, subscriber: Subscriber[T]) -> Callable[[], None] | None:
        if self._stopped:
            subscriber.cancel()
            return None
        self._subscribers.append(subscriber)

        def _unregister() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unregister


class DispatchError(RuntimeError):
    """Raised when more than one subscriber callback fails during a fan-out."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = tuple(errors)
        detail = "; ".join(f"{type(err).__name__}: {err}" for err in errors)
        super().__init__(f"{len(errors)} subscriber(s) failed: {detail}")


def _dispatch(
    subscribers: tuple[Subscriber[T], ...], deliver: Callable[[Subscriber[T]], None]
) -> None:
    # Every subscriber in the snapshot is reached before anything is raised.
    errors: list[Exception] = []
    for subscriber in subscribers:
        try:
            deliver(subscriber)
        except Exception as exc:
            errors.append(exc)
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise DispatchError(errors)
