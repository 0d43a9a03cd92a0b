from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class Observer(Protocol[T_contra]):
    def next(self, value: T_contra) -> None: ...

    def error(self, err: Any) -> None: ...

    def complete(self) -> None: ...


def _noop_next(value: Any) -> None:
    return None


def _noop_error(err: Any) -> None:
    return None


def _noop_complete() -> None:
    return None


@dataclass(frozen=True)
class CallbackObserver(Generic[T]):
    on_next: Callable[[T], None] = _noop_next
    on_error: Callable[[Any], None] = _noop_error
    on_complete: Callable[[], None] = _noop_complete

    def next(self, value: T) -> None:
        self.on_next(value)

    def error(self, err: Any) -> None:
        self.on_error(err)

    def complete(self) -> None:
        self.on_complete()


def to_observer(
    observer: Observer[T] | Callable[[T], None] | None = None,
    *,
    next: Callable[[T], None] | None = None,
    error: Callable[[Any], None] | None = None,
    complete: Callable[[], None] | None = None,
) -> Observer[T]:
    if observer is not None and (next or error or complete):
        raise ValueError("pass either an observer or callbacks, not both")
    if observer is None:
        return CallbackObserver(
            on_next=next or _noop_next,
            on_error=error or _noop_error,
            on_complete=complete or _noop_complete,
        )
    if _is_observer(observer):
        return observer  # type: ignore[return-value]
    if callable(observer):
        return CallbackObserver(on_next=observer)
    raise TypeError(f"unsupported observer: {type(observer).__name__}")


def _is_observer(candidate: object) -> bool:
    return all(
        callable(getattr(candidate, name, None)) for name in ("next", "error", "complete")
    )
