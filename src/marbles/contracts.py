from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_ERROR = "error"


class TokenKind(str, Enum):
    VALUE = "value"
    ERROR = "error"
    COMPLETE = "complete"
    SUBSCRIPTION_POINT = "subscription_point"


class NotificationKind(str, Enum):
    NEXT = "N"
    ERROR = "E"
    COMPLETE = "C"


@dataclass(frozen=True)
class DiagramToken:
    frame: int
    kind: TokenKind
    symbol: str | None = None
    payload: Any = None


@dataclass(frozen=True)
class ParsedDiagram:
    diagram: str
    tokens: Sequence[DiagramToken]
    frame_count: int
    subscription_frame: int | None = None

    @property
    def events(self) -> tuple[DiagramToken, ...]:
        return tuple(
            token for token in self.tokens if token.kind is not TokenKind.SUBSCRIPTION_POINT
        )


@dataclass(frozen=True)
class Notification:
    frame: int
    kind: NotificationKind
    value: Any = None

    @classmethod
    def next(cls, frame: int, value: Any) -> Notification:
        return cls(frame=frame, kind=NotificationKind.NEXT, value=value)

    @classmethod
    def error(cls, frame: int, err: Any) -> Notification:
        return cls(frame=frame, kind=NotificationKind.ERROR, value=err)

    @classmethod
    def complete(cls, frame: int) -> Notification:
        return cls(frame=frame, kind=NotificationKind.COMPLETE)

    @property
    def terminal(self) -> bool:
        return self.kind is not NotificationKind.NEXT


@dataclass(frozen=True)
class SubscriptionWindow:
    subscribe_frame: int
    unsubscribe_frame: int | None = None
