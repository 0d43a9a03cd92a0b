from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import Any

from marbles.clock import VirtualClock
from marbles.contracts import DEFAULT_ERROR, DiagramToken, ParsedDiagram, TokenKind
from marbles.parser import ParseError, parse_diagram
from streams.broadcaster import Broadcaster
from streams.observer import Observer
from streams.stream import Stream
from streams.subscriber import Subscriber
from streams.subscription import Subscription


class ColdStream(Stream[Any]):
    """Replays the diagram from frame zero for every new subscriber."""

    def __init__(self, parsed: ParsedDiagram, clock: VirtualClock) -> None:
        if parsed.subscription_frame is not None:
            raise ParseError(
                "cold diagram cannot contain '^'",
                diagram=parsed.diagram,
                position=parsed.diagram.index("^"),
            )
        super().__init__(self._produce)
        self.parsed = parsed
        self.subscription_frames: list[int] = []
        self._clock = clock

    def subscription_count(self) -> int:
        return len(self.subscription_frames)

    def _produce(self, subscriber: Subscriber[Any]) -> None:
        self.subscription_frames.append(self._clock.now())
        for token in self.parsed.events:
            subscriber.schedule(self._clock, token.frame, partial(_emit, subscriber, token))


class HotStream(Stream[Any]):
    """Shares one timeline, anchored at the clock time of construction.

    Events before '^' are treated as history: they fire once, immediately,
    into a broadcaster nobody can have subscribed to yet.
    """

    def __init__(self, parsed: ParsedDiagram, clock: VirtualClock) -> None:
        super().__init__(self._produce)
        self.parsed = parsed
        self.subscription_frames: list[int] = []
        self.connection = Subscription()
        self._clock = clock
        self._broadcaster: Broadcaster[Any] = Broadcaster()
        anchor = clock.now()
        for token in parsed.events:
            if token.frame < 0:
                _emit(self._broadcaster, token)
                continue
            clock.schedule_at(
                anchor + token.frame,
                partial(_emit, self._broadcaster, token),
                owner=self.connection,
            )

    def subscription_count(self) -> int:
        return len(self.subscription_frames)

    def disconnect(self) -> None:
        self.connection.cancel()

    def _produce(self, subscriber: Subscriber[Any]) -> Subscription:
        self.subscription_frames.append(self._clock.now())
        return self._broadcaster.subscribe(subscriber)


def cold_stream(
    clock: VirtualClock,
    diagram: str,
    values: Mapping[str, Any] | None = None,
    error: Any = DEFAULT_ERROR,
    *,
    frame_ms: int = 1,
) -> ColdStream:
    return ColdStream(parse_diagram(diagram, values, error, frame_ms=frame_ms), clock)


def hot_stream(
    clock: VirtualClock,
    diagram: str,
    values: Mapping[str, Any] | None = None,
    error: Any = DEFAULT_ERROR,
    *,
    frame_ms: int = 1,
) -> HotStream:
    return HotStream(parse_diagram(diagram, values, error, frame_ms=frame_ms), clock)


def _emit(observer: Observer[Any], token: DiagramToken) -> None:
    if token.kind is TokenKind.VALUE:
        observer.next(token.payload)
    elif token.kind is TokenKind.ERROR:
        observer.error(token.payload)
    elif token.kind is TokenKind.COMPLETE:
        observer.complete()
