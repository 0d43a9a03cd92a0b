from __future__ import annotations

from collections.abc import Callable
from functools import reduce
from typing import Any, Generic, TypeVar

from streams.observer import Observer, to_observer
from streams.subscriber import Subscriber
from streams.subscription import Subscription, Teardown

T = TypeVar("T")

Producer = Callable[[Subscriber[T]], Teardown]
Operator = Callable[["Stream[Any]"], "Stream[Any]"]


class Stream(Generic[T]):
    """Lazy push-based blueprint: nothing runs until subscribe is called.

    Every subscribe builds a fresh Subscriber and invokes the producer with
    it synchronously. attach runs the producer against a Subscriber the
    caller already linked, which operators use so upstream cancellation is
    wired before the first signal. Whatever the producer returns (a
    callable or another Subscription) is attached as teardown.
    """

    def __init__(self, producer: Producer[T]) -> None:
        self._producer = producer

    def subscribe(
        self,
        observer: Observer[T] | Callable[[T], None] | None = None,
        *,
        next: Callable[[T], None] | None = None,
        error: Callable[[Any], None] | None = None,
        complete: Callable[[], None] | None = None,
    ) -> Subscription:
        observer = to_observer(observer, next=next, error=error, complete=complete)
        return self.attach(Subscriber(observer))

    def attach(self, subscriber: Subscriber[T]) -> Subscription:
        teardown = subscriber.guard("producer", self._producer, subscriber)
        subscriber.add(teardown)
        return subscriber.subscription

    def pipe(self, *operators: Operator) -> Stream[Any]:
        return reduce(lambda stream, operator: operator(stream), operators, self)
