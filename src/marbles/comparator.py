from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from itertools import zip_longest
from typing import Any

from marbles.contracts import Notification, NotificationKind
from marbles.parser import SymbolTable, render_diagram


@dataclass(frozen=True)
class FrameMismatch:
    frame: int
    expected: Notification | None
    actual: Notification | None

    def describe(self) -> str:
        return (
            f"frame {self.frame}: expected {_describe(self.expected)}, "
            f"got {_describe(self.actual)}"
        )


@dataclass(frozen=True)
class AssertionReport:
    label: str
    expected_diagram: str
    actual_diagram: str
    mismatches: Sequence[FrameMismatch]

    def render(self) -> str:
        lines = [
            f"{self.label}:",
            f"  expected: {self.expected_diagram}",
            f"  actual:   {self.actual_diagram}",
        ]
        lines.extend(f"  - {mismatch.describe()}" for mismatch in self.mismatches)
        return "\n".join(lines)


class AssertionMismatchError(AssertionError):
    """Raised once per run with a report for every failing expectation."""

    def __init__(self, reports: Sequence[AssertionReport]) -> None:
        self.reports = tuple(reports)
        super().__init__("\n".join(report.render() for report in self.reports))

    @property
    def mismatches(self) -> tuple[FrameMismatch, ...]:
        return tuple(mismatch for report in self.reports for mismatch in report.mismatches)


def diff_notifications(
    expected: Iterable[Notification], actual: Iterable[Notification]
) -> tuple[FrameMismatch, ...]:
    expected_by_frame = _by_frame(expected)
    actual_by_frame = _by_frame(actual)
    mismatches: list[FrameMismatch] = []
    for frame in sorted(set(expected_by_frame) | set(actual_by_frame)):
        pairs = zip_longest(expected_by_frame.get(frame, []), actual_by_frame.get(frame, []))
        for want, got in pairs:
            if want is None or got is None or not notifications_match(want, got):
                mismatches.append(FrameMismatch(frame=frame, expected=want, actual=got))
    return tuple(mismatches)


def notifications_match(expected: Notification, actual: Notification) -> bool:
    if expected.frame != actual.frame or expected.kind is not actual.kind:
        return False
    if expected.kind is NotificationKind.ERROR:
        return errors_match(expected.value, actual.value)
    return bool(expected.value == actual.value)


def errors_match(expected: Any, actual: Any) -> bool:
    if isinstance(expected, type) and issubclass(expected, BaseException):
        return isinstance(actual, expected)
    if isinstance(expected, BaseException) and isinstance(actual, BaseException):
        return type(expected) is type(actual) and expected.args == actual.args
    return bool(expected == actual)


def compare(
    label: str,
    expected: Sequence[Notification],
    actual: Sequence[Notification],
    values: Mapping[str, Any] | None = None,
) -> AssertionReport | None:
    mismatches = diff_notifications(expected, actual)
    if not mismatches:
        return None
    frame_count = max((item.frame + 1 for item in (*expected, *actual)), default=0)
    symbols = SymbolTable(values)
    return AssertionReport(
        label=label,
        expected_diagram=render_diagram(expected, frame_count=frame_count, symbols=symbols),
        actual_diagram=render_diagram(actual, frame_count=frame_count, symbols=symbols),
        mismatches=mismatches,
    )


def _by_frame(notifications: Iterable[Notification]) -> dict[int, list[Notification]]:
    grouped: dict[int, list[Notification]] = {}
    for notification in notifications:
        grouped.setdefault(notification.frame, []).append(notification)
    return grouped


def _describe(notification: Notification | None) -> str:
    if notification is None:
        return "nothing"
    if notification.kind is NotificationKind.NEXT:
        return f"next({notification.value!r})"
    if notification.kind is NotificationKind.ERROR:
        return f"error({notification.value!r})"
    return "complete"
