from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol


class StructuredLogger(Protocol):
    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None: ...


@dataclass(frozen=True)
class StdlibLogger:
    logger: logging.Logger

    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None:
        self.logger.log(level, message, extra={"fields": dict(fields)})


@dataclass(frozen=True)
class NullLogger:
    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None:
        return None


@dataclass(frozen=True)
class Observability:
    logger: StructuredLogger

    def log_runtime_error(
        self, *, stage: str, subscription_id: int, error: BaseException
    ) -> None:
        self.logger.log(
            logging.WARNING,
            "streams.runtime_error",
            {
                "stage": stage,
                "subscription_id": subscription_id,
                "error_kind": type(error).__name__,
                "error_detail": str(error),
            },
        )

    def log_broadcast_terminated(self, *, kind: str, subscriber_count: int) -> None:
        self.logger.log(
            logging.DEBUG,
            "streams.broadcast.terminated",
            {"kind": kind, "subscriber_count": subscriber_count},
        )


_OBSERVABILITY = Observability(logger=NullLogger())


def set_observability(observability: Observability) -> None:
    global _OBSERVABILITY
    _OBSERVABILITY = observability


def get_observability() -> Observability:
    return _OBSERVABILITY
