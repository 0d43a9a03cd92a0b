"""Representative operators and creation functions.

Operators are plain functions returning ``Stream -> Stream`` callables for
use with ``Stream.pipe``. Names follow the usual reactive vocabulary, so
``map`` and ``filter`` shadow the builtins inside this module only.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from streams.observability import get_observability
from streams.observer import CallbackObserver
from streams.scheduling import Scheduler, get_default_scheduler
from streams.stream import Operator, Stream
from streams.subscriber import Subscriber, SubscriptionRuntimeError

T = TypeVar("T")
U = TypeVar("U")


def map(project: Callable[[T], U]) -> Operator:
    def operator(source: Stream[T]) -> Stream[U]:
        def producer(subscriber: Subscriber[U]) -> None:
            def on_next(value: T) -> None:
                try:
                    result = project(value)
                except Exception as exc:
                    _fail(subscriber, "map", exc)
                    return
                subscriber.next(result)

            _connect(source, subscriber, on_next)

        return Stream(producer)

    return operator


def filter(predicate: Callable[[T], bool]) -> Operator:
    def operator(source: Stream[T]) -> Stream[T]:
        def producer(subscriber: Subscriber[T]) -> None:
            def on_next(value: T) -> None:
                try:
                    keep = predicate(value)
                except Exception as exc:
                    _fail(subscriber, "filter", exc)
                    return
                if keep:
                    subscriber.next(value)

            _connect(source, subscriber, on_next)

        return Stream(producer)

    return operator


def skip(count: int) -> Operator:
    if count < 0:
        raise ValueError("skip count must be >= 0")

    def operator(source: Stream[T]) -> Stream[T]:
        def producer(subscriber: Subscriber[T]) -> None:
            remaining = count

            def on_next(value: T) -> None:
                nonlocal remaining
                if remaining > 0:
                    remaining -= 1
                    return
                subscriber.next(value)

            _connect(source, subscriber, on_next)

        return Stream(producer)

    return operator


def from_iterable(items: Iterable[T]) -> Stream[T]:
    def producer(subscriber: Subscriber[T]) -> None:
        if subscriber.closed:
            return
        for item in items:
            subscriber.next(item)
            if subscriber.closed:
                return
        subscriber.complete()

    return Stream(producer)


def of(*values: T) -> Stream[T]:
    return from_iterable(values)


def defer(factory: Callable[[], Stream[T]]) -> Stream[T]:
    def producer(subscriber: Subscriber[T]) -> None:
        source = factory()
        inner: Subscriber[T] = Subscriber(subscriber)
        subscriber.add(inner.subscription)
        source.attach(inner)

    return Stream(producer)


def timer(delay: int, scheduler: Scheduler | None = None) -> Stream[int]:
    if delay < 0:
        raise ValueError("timer delay must be >= 0")

    def producer(subscriber: Subscriber[int]) -> None:
        def fire() -> None:
            subscriber.next(0)
            subscriber.complete()

        subscriber.schedule(scheduler or get_default_scheduler(), delay, fire)

    return Stream(producer)


def _connect(
    source: Stream[Any], subscriber: Subscriber[Any], on_next: Callable[[Any], None]
) -> None:
    upstream: Subscriber[Any] = Subscriber(
        CallbackObserver(
            on_next=on_next,
            on_error=subscriber.error,
            on_complete=subscriber.complete,
        )
    )
    # Linked first so a downstream terminal stops a synchronous source.
    subscriber.add(upstream.subscription)
    source.attach(upstream)


def _fail(subscriber: Subscriber[Any], stage: str, exc: Exception) -> None:
    get_observability().log_runtime_error(
        stage=stage, subscription_id=subscriber.subscription.id, error=exc
    )
    subscriber.error(SubscriptionRuntimeError(stage, exc))
