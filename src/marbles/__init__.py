"""marbles virtual-time harness for streams."""

from marbles.clock import ScheduledTask, SchedulingOverflowError, VirtualClock
from marbles.comparator import (
    AssertionMismatchError,
    AssertionReport,
    FrameMismatch,
    compare,
    diff_notifications,
    errors_match,
    notifications_match,
)
from marbles.config import HarnessConfig, load_default_config
from marbles.contracts import (
    DEFAULT_ERROR,
    DiagramToken,
    Notification,
    NotificationKind,
    ParsedDiagram,
    SubscriptionWindow,
    TokenKind,
)
from marbles.factories import ColdStream, HotStream, cold_stream, hot_stream
from marbles.harness import (
    Expectation,
    HarnessState,
    RunHelpers,
    TestScheduler,
    cold,
    get_active_scheduler,
    hot,
)
from marbles.observability import NullLogger, NullMetrics, Observability, StdlibLogger
from marbles.parser import (
    ParseError,
    parse_diagram,
    parse_subscription_diagram,
    parse_time,
    render_diagram,
    render_parsed,
    to_notifications,
)
from marbles.recorder import NotificationRecorder

__all__ = [
    "ScheduledTask",
    "SchedulingOverflowError",
    "VirtualClock",
    "AssertionMismatchError",
    "AssertionReport",
    "FrameMismatch",
    "compare",
    "diff_notifications",
    "errors_match",
    "notifications_match",
    "HarnessConfig",
    "load_default_config",
    "DEFAULT_ERROR",
    "DiagramToken",
    "Notification",
    "NotificationKind",
    "ParsedDiagram",
    "SubscriptionWindow",
    "TokenKind",
    "ColdStream",
    "HotStream",
    "cold_stream",
    "hot_stream",
    "Expectation",
    "HarnessState",
    "RunHelpers",
    "TestScheduler",
    "cold",
    "get_active_scheduler",
    "hot",
    "NullLogger",
    "NullMetrics",
    "Observability",
    "StdlibLogger",
    "ParseError",
    "parse_diagram",
    "parse_subscription_diagram",
    "parse_time",
    "render_diagram",
    "render_parsed",
    "to_notifications",
    "NotificationRecorder",
]
