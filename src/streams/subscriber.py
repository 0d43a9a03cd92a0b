from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from streams.observability import get_observability
from streams.observer import Observer
from streams.subscription import Subscription, Teardown

if TYPE_CHECKING:
    from streams.scheduling import Scheduler

T = TypeVar("T")
R = TypeVar("R")


class SubscriptionRuntimeError(RuntimeError):
    """Delivered as the error payload when a producer or operator function raises."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage} raised {type(cause).__name__}: {cause}")
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause


class SubscriberState(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


class Subscriber(Generic[T]):
    """Per-subscription state machine in front of a destination observer.

    Only ACTIVE accepts signals. The first terminal signal or a cancel moves
    it to COMPLETED, ERRORED or CANCELLED, and every later signal is dropped.
    """

    def __init__(self, destination: Observer[T]) -> None:
        self._destination = destination
        self._destination_raised = False
        self.state = SubscriberState.ACTIVE
        self.subscription = Subscription()
        self.subscription.add(self._on_cancel)

    @property
    def closed(self) -> bool:
        return self.state is not SubscriberState.ACTIVE

    def next(self, value: T) -> None:
        if self.closed:
            return
        self._deliver(self._destination.next, value)

    def error(self, err: Any) -> None:
        if self.closed:
            return
        self.state = SubscriberState.ERRORED
        try:
            self._deliver(self._destination.error, err)
        finally:
            self.subscription.cancel()

    def complete(self) -> None:
        if self.closed:
            return
        self.state = SubscriberState.COMPLETED
        try:
            self._deliver(self._destination.complete)
        finally:
            self.subscription.cancel()

    def add(self, teardown: Teardown) -> None:
        self.subscription.add(teardown)

    def cancel(self) -> None:
        self.subscription.cancel()

    def guard(self, stage: str, fn: Callable[..., R], *args: Any) -> R | None:
        # Errors raised by the destination itself propagate untouched.
        self._destination_raised = False
        try:
            return fn(*args)
        except Exception as exc:
            if self._destination_raised:
                raise
            get_observability().log_runtime_error(
                stage=stage, subscription_id=self.subscription.id, error=exc
            )
            # No-op once terminal, leaving the log entry as the only trace.
            self.error(SubscriptionRuntimeError(stage, exc))
            return None

    def schedule(self, scheduler: Scheduler, delay: int, action: Callable[[], None]) -> object:
        return scheduler.schedule(
            delay,
            lambda: self.guard("scheduled", action),
            owner=self.subscription,
        )

    def _deliver(self, callback: Callable[..., None], *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            self._destination_raised = True
            raise

    def _on_cancel(self) -> None:
        if self.state is SubscriberState.ACTIVE:
            self.state = SubscriberState.CANCELLED
