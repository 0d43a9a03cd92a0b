from __future__ import annotations

import re
import string
from collections.abc import Iterable, Mapping
from typing import Any

from marbles.contracts import (
    DEFAULT_ERROR,
    DiagramToken,
    Notification,
    NotificationKind,
    ParsedDiagram,
    SubscriptionWindow,
    TokenKind,
)

_TIME_PROGRESSION = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m)")
_UNIT_MS = {"ms": 1, "s": 1000, "m": 60_000}
_SYMBOL_POOL = string.ascii_lowercase + string.ascii_uppercase + string.digits


class ParseError(ValueError):
    """Raised when a diagram contains a malformed token."""

    def __init__(self, message: str, *, diagram: str, position: int) -> None:
        self.message = message
        self.diagram = diagram
        self.position = position
        pointer = " " * position + "^"
        super().__init__(f"{message} at position {position}\n  {diagram}\n  {pointer}")


def parse_diagram(
    diagram: str,
    values: Mapping[str, Any] | None = None,
    error: Any = DEFAULT_ERROR,
    *,
    frame_ms: int = 1,
) -> ParsedDiagram:
    tokens: list[DiagramToken] = []
    frame = 0
    subscription_frame: int | None = None
    group_start: int | None = None
    group_size = 0
    terminal_at: int | None = None
    index = 0

    while index < len(diagram):
        char = diagram[index]
        in_group = group_start is not None

        if not in_group:
            advance = _time_progression(diagram, index, frame_ms)
            if advance is not None:
                frames, index = advance
                frame += frames
                continue

        if char.isspace():
            index += 1
            continue

        if char == "-":
            if in_group:
                raise ParseError("'-' inside a group", diagram=diagram, position=index)
            frame += 1
        elif char == "(":
            if in_group:
                raise ParseError("nested group", diagram=diagram, position=index)
            group_start = index
            group_size = 0
        elif char == ")":
            if not in_group:
                raise ParseError("unmatched ')'", diagram=diagram, position=index)
            if group_size == 0:
                raise ParseError("empty group", diagram=diagram, position=index)
            group_start = None
            frame += 1
        elif char == "^":
            if in_group:
                raise ParseError("'^' inside a group", diagram=diagram, position=index)
            if subscription_frame is not None:
                raise ParseError("multiple '^' markers", diagram=diagram, position=index)
            subscription_frame = frame
            tokens.append(DiagramToken(frame=frame, kind=TokenKind.SUBSCRIPTION_POINT, symbol="^"))
            frame += 1
        elif char in "|#" or char.isalnum():
            if terminal_at is not None:
                message = "multiple terminal markers" if char in "|#" else "event after terminal"
                raise ParseError(message, diagram=diagram, position=index)
            tokens.append(_event_token(char, frame, values, error))
            if char in "|#":
                terminal_at = index
            if in_group:
                group_size += 1
            else:
                frame += 1
        else:
            raise ParseError(f"unknown character {char!r}", diagram=diagram, position=index)
        index += 1

    if group_start is not None:
        raise ParseError("unmatched '('", diagram=diagram, position=group_start)

    offset = subscription_frame or 0
    if offset:
        tokens = [
            DiagramToken(
                frame=token.frame - offset,
                kind=token.kind,
                symbol=token.symbol,
                payload=token.payload,
            )
            for token in tokens
        ]
    return ParsedDiagram(
        diagram=diagram,
        tokens=tuple(tokens),
        frame_count=frame,
        subscription_frame=subscription_frame,
    )


def parse_subscription_diagram(diagram: str, *, frame_ms: int = 1) -> SubscriptionWindow:
    frame = 0
    subscribe_frame: int | None = None
    unsubscribe_frame: int | None = None
    index = 0
    while index < len(diagram):
        advance = _time_progression(diagram, index, frame_ms)
        if advance is not None:
            frames, index = advance
            frame += frames
            continue
        char = diagram[index]
        if char.isspace():
            index += 1
            continue
        if char == "^":
            if subscribe_frame is not None:
                raise ParseError("multiple '^' markers", diagram=diagram, position=index)
            subscribe_frame = frame
        elif char == "!":
            if unsubscribe_frame is not None:
                raise ParseError("multiple '!' markers", diagram=diagram, position=index)
            unsubscribe_frame = frame
        elif char != "-":
            raise ParseError(f"unknown character {char!r}", diagram=diagram, position=index)
        frame += 1
        index += 1

    subscribe_frame = subscribe_frame or 0
    if unsubscribe_frame is not None and unsubscribe_frame < subscribe_frame:
        raise ParseError(
            "'!' before '^'", diagram=diagram, position=diagram.index("!")
        )
    return SubscriptionWindow(subscribe_frame=subscribe_frame, unsubscribe_frame=unsubscribe_frame)


def parse_time(diagram: str, *, frame_ms: int = 1) -> int:
    frame = 0
    index = 0
    while index < len(diagram):
        advance = _time_progression(diagram, index, frame_ms)
        if advance is not None:
            frames, index = advance
            frame += frames
            continue
        char = diagram[index]
        if char == "|":
            return frame
        if char == "-":
            frame += 1
        elif not char.isspace():
            raise ParseError(f"unknown character {char!r}", diagram=diagram, position=index)
        index += 1
    raise ParseError("time diagram needs a '|'", diagram=diagram, position=len(diagram))


def to_notifications(parsed: ParsedDiagram) -> tuple[Notification, ...]:
    notifications: list[Notification] = []
    for token in parsed.events:
        if token.kind is TokenKind.VALUE:
            notifications.append(Notification.next(token.frame, token.payload))
        elif token.kind is TokenKind.ERROR:
            notifications.append(Notification.error(token.frame, token.payload))
        else:
            notifications.append(Notification.complete(token.frame))
    return tuple(notifications)


def render_parsed(parsed: ParsedDiagram) -> str:
    offset = parsed.subscription_frame or 0
    frames: dict[int, list[str]] = {}
    for token in parsed.events:
        frames.setdefault(token.frame + offset, []).append(token.symbol or "?")
    return _render_frames(frames, parsed.frame_count, parsed.subscription_frame)


def render_diagram(
    notifications: Iterable[Notification],
    values: Mapping[str, Any] | None = None,
    *,
    frame_count: int = 0,
    symbols: SymbolTable | None = None,
) -> str:
    symbols = symbols or SymbolTable(values)
    frames: dict[int, list[str]] = {}
    for notification in notifications:
        if notification.kind is NotificationKind.NEXT:
            symbol = symbols.symbol_for(notification.value)
        elif notification.kind is NotificationKind.ERROR:
            symbol = "#"
        else:
            symbol = "|"
        frames.setdefault(notification.frame, []).append(symbol)
    return _render_frames(frames, frame_count, None)


def _render_frames(
    frames: Mapping[int, list[str]], frame_count: int, subscription_frame: int | None
) -> str:
    last = max(frames) + 1 if frames else 0
    parts: list[str] = []
    for frame in range(max(last, frame_count)):
        if frame == subscription_frame:
            parts.append("^")
            continue
        symbols = frames.get(frame)
        if not symbols:
            parts.append("-")
        elif len(symbols) == 1:
            parts.append(symbols[0])
        else:
            parts.append("(" + "".join(symbols) + ")")
    return "".join(parts)


class SymbolTable:
    def __init__(self, values: Mapping[str, Any] | None) -> None:
        self._known: list[tuple[Any, str]] = [
            (value, symbol) for symbol, value in (values or {}).items()
        ]
        self._used = {symbol for _, symbol in self._known}

    def symbol_for(self, value: Any) -> str:
        for known, symbol in self._known:
            if known == value:
                return symbol
        if isinstance(value, str) and len(value) == 1 and value.isalnum() and value not in self._used:
            symbol = value
        else:
            symbol = next((item for item in _SYMBOL_POOL if item not in self._used), "?")
        self._known.append((value, symbol))
        self._used.add(symbol)
        return symbol


def _event_token(
    char: str, frame: int, values: Mapping[str, Any] | None, error: Any
) -> DiagramToken:
    if char == "|":
        return DiagramToken(frame=frame, kind=TokenKind.COMPLETE, symbol=char)
    if char == "#":
        return DiagramToken(frame=frame, kind=TokenKind.ERROR, symbol=char, payload=error)
    payload = values[char] if values is not None and char in values else char
    return DiagramToken(frame=frame, kind=TokenKind.VALUE, symbol=char, payload=payload)


def _time_progression(diagram: str, index: int, frame_ms: int) -> tuple[int, int] | None:
    if not diagram[index].isdigit():
        return None
    if index > 0 and not diagram[index - 1].isspace():
        return None
    match = _TIME_PROGRESSION.match(diagram, index)
    if match is None:
        return None
    end = match.end()
    if end < len(diagram) and not diagram[end].isspace():
        return None
    duration_ms = float(match.group(1)) * _UNIT_MS[match.group(2)]
    frames = duration_ms / frame_ms
    if not frames.is_integer():
        raise ParseError(
            f"time progression {match.group(0)!r} is not a whole number of frames",
            diagram=diagram,
            position=index,
        )
    return int(frames), end
