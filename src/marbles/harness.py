from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from marbles.clock import VirtualClock
from marbles.comparator import AssertionMismatchError, AssertionReport, compare
from marbles.config import HarnessConfig, load_default_config, validate_config
from marbles.contracts import Notification, SubscriptionWindow
from marbles.factories import ColdStream, HotStream, cold_stream, hot_stream
from marbles.observability import get_observability
from marbles.parser import parse_diagram, parse_subscription_diagram, parse_time, to_notifications
from marbles.recorder import NotificationRecorder
from streams.scheduling import use_scheduler
from streams.stream import Stream
from streams.subscription import Subscription

R = TypeVar("R")

_UNSET: Any = object()


class HarnessState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class RunHelpers:
    cold: Callable[..., ColdStream]
    hot: Callable[..., HotStream]
    expect: Callable[..., Expectation]
    flush: Callable[[], None]
    time: Callable[[str], int]
    clock: VirtualClock


@dataclass
class _PendingAssertion:
    label: str
    actual: NotificationRecorder
    expected: Sequence[Notification] | NotificationRecorder
    values: Mapping[str, Any] | None = None

    def expected_records(self) -> Sequence[Notification]:
        if isinstance(self.expected, NotificationRecorder):
            return tuple(self.expected.all_records())
        return self.expected


class Expectation:
    def __init__(self, scheduler: TestScheduler, actual: NotificationRecorder, label: str) -> None:
        self._scheduler = scheduler
        self._actual = actual
        self._label = label

    def to_match(
        self,
        expected: str | Stream[Any],
        values: Mapping[str, Any] | None = None,
        error: Any = _UNSET,
    ) -> None:
        if isinstance(expected, Stream):
            recorder = self._scheduler.capture(expected)
            self._scheduler.register(
                _PendingAssertion(self._label, self._actual, recorder, values)
            )
            return
        parsed = parse_diagram(
            expected,
            values,
            self._scheduler.default_error if error is _UNSET else error,
            frame_ms=self._scheduler.config.clock.frame_ms,
        )
        notifications = tuple(item for item in to_notifications(parsed) if item.frame >= 0)
        self._scheduler.register(
            _PendingAssertion(self._label, self._actual, notifications, values)
        )

    to_be = to_match


class TestScheduler:
    """Virtual-time harness: build marble streams, expect, then flush and diff.

    Every ``run`` starts on a fresh clock at frame zero and installs it as
    the default streams scheduler for the duration of the body, so
    time-based operators such as ``timer`` advance in frames instead of
    wall time. Every expectation is checked after the flush and all
    failures are raised together.
    """

    __test__ = False

    def __init__(self, config: HarnessConfig | None = None) -> None:
        self.config = config or load_default_config()
        validate_config(self.config)
        self.clock = VirtualClock(max_frames=self.config.clock.max_frames)
        self.state = HarnessState.IDLE
        self._pending: list[_PendingAssertion] = []
        self._expectations = 0

    @property
    def default_error(self) -> str:
        return self.config.diagrams.default_error

    def cold(
        self, diagram: str, values: Mapping[str, Any] | None = None, error: Any = _UNSET
    ) -> ColdStream:
        return cold_stream(
            self.clock,
            diagram,
            values,
            self.default_error if error is _UNSET else error,
            frame_ms=self.config.clock.frame_ms,
        )

    def hot(
        self, diagram: str, values: Mapping[str, Any] | None = None, error: Any = _UNSET
    ) -> HotStream:
        return hot_stream(
            self.clock,
            diagram,
            values,
            self.default_error if error is _UNSET else error,
            frame_ms=self.config.clock.frame_ms,
        )

    def time(self, diagram: str) -> int:
        return parse_time(diagram, frame_ms=self.config.clock.frame_ms)

    def expect(
        self, stream: Stream[Any], subscription: str | None = None, *, label: str | None = None
    ) -> Expectation:
        self._expectations += 1
        label = label or f"expectation #{self._expectations}"
        window = (
            parse_subscription_diagram(subscription, frame_ms=self.config.clock.frame_ms)
            if subscription is not None
            else SubscriptionWindow(subscribe_frame=self.clock.now())
        )
        return Expectation(self, self.capture(stream, window), label)

    def capture(
        self, stream: Stream[Any], window: SubscriptionWindow | None = None
    ) -> NotificationRecorder:
        recorder = NotificationRecorder(self.clock)
        window = window or SubscriptionWindow(subscribe_frame=self.clock.now())
        handle: list[Subscription] = []

        def subscribe() -> None:
            handle.append(stream.subscribe(recorder))

        def unsubscribe() -> None:
            for subscription in handle:
                subscription.cancel()

        if window.subscribe_frame <= self.clock.now():
            subscribe()
        else:
            self.clock.schedule_at(window.subscribe_frame, subscribe)
        if window.unsubscribe_frame is not None:
            self.clock.schedule_at(max(window.unsubscribe_frame, self.clock.now()), unsubscribe)
        return recorder

    def register(self, pending: _PendingAssertion) -> None:
        self._pending.append(pending)

    def flush(self) -> None:
        self.clock.flush()
        self._verify()

    def run(self, body: Callable[[RunHelpers], R]) -> R:
        if self.state is HarnessState.RUNNING:
            raise RuntimeError("TestScheduler.run cannot be nested")
        self.state = HarnessState.RUNNING
        self.clock = VirtualClock(max_frames=self.config.clock.max_frames)
        _ACTIVE.append(self)
        try:
            with use_scheduler(self.clock):
                result = body(self._helpers())
                self.flush()
            return result
        finally:
            _ACTIVE.remove(self)
            self._pending.clear()
            self.state = HarnessState.IDLE

    def _helpers(self) -> RunHelpers:
        return RunHelpers(
            cold=self.cold,
            hot=self.hot,
            expect=self.expect,
            flush=self.flush,
            time=self.time,
            clock=self.clock,
        )

    def _verify(self) -> None:
        observability = get_observability()
        pending, self._pending = self._pending, []
        reports: list[AssertionReport] = []
        for item in pending:
            report = compare(
                item.label,
                item.expected_records(),
                tuple(item.actual.all_records()),
                item.values,
            )
            observability.record_assertion(passed=report is None)
            if report is not None:
                observability.log_assertion_failed(
                    label=report.label, mismatch_count=len(report.mismatches)
                )
                reports.append(report)
        observability.log_run_completed(
            expectations=len(pending), failures=len(reports), now=self.clock.now()
        )
        if reports:
            raise AssertionMismatchError(reports)


_ACTIVE: list[TestScheduler] = []


def get_active_scheduler() -> TestScheduler:
    if not _ACTIVE:
        raise RuntimeError("no TestScheduler is running")
    return _ACTIVE[-1]


def cold(diagram: str, values: Mapping[str, Any] | None = None, error: Any = _UNSET) -> ColdStream:
    return get_active_scheduler().cold(diagram, values, error)


def hot(diagram: str, values: Mapping[str, Any] | None = None, error: Any = _UNSET) -> HotStream:
    return get_active_scheduler().hot(diagram, values, error)
