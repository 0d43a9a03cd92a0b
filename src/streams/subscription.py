from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Union

Teardown = Union["Subscription", Callable[[], None], None]

_ids = itertools.count(1)


class Subscription:
    def __init__(self, teardown: Teardown = None) -> None:
        self.id = next(_ids)
        self._closed = False
        self._teardowns: list[Callable[[], None]] = []
        self._children: list[Subscription] = []
        self._parents: list[Subscription] = []
        if teardown is not None:
            self.add(teardown)

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, teardown: Teardown) -> None:
        if teardown is None or teardown is self:
            return
        if isinstance(teardown, Subscription):
            if self._closed:
                teardown.cancel()
                return
            if teardown.closed:
                return
            self._children.append(teardown)
            teardown._parents.append(self)
            return
        if not callable(teardown):
            raise TypeError(f"unsupported teardown: {type(teardown).__name__}")
        if self._closed:
            teardown()
            return
        self._teardowns.append(teardown)

    def remove(self, child: Subscription) -> None:
        if child in self._children:
            self._children.remove(child)
            child._parents.remove(self)

    def cancel(self) -> None:
        if self._closed:
            return
        self._closed = True
        for parent in list(self._parents):
            parent.remove(self)
        teardowns, self._teardowns = self._teardowns, []
        children, self._children = self._children, []
        errors: list[Exception] = []
        for teardown in teardowns:
            try:
                teardown()
            except Exception as exc:
                errors.append(exc)
        for child in children:
            if self in child._parents:
                child._parents.remove(self)
            try:
                child.cancel()
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise TeardownError(errors)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


class TeardownError(RuntimeError):
    """Raised when one or more teardown actions fail during cancel."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = tuple(errors)
        detail = "; ".join(f"{type(err).__name__}: {err}" for err in errors)
        super().__init__(f"{len(errors)} teardown(s) failed: {detail}")
