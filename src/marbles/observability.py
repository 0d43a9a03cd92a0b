from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol


class StructuredLogger(Protocol):
    def log(self, level: int, message: str, fields: Mapping[str, object]) -> None: ...


class MetricsRecorder(Protocol):
    def increment(
        self, name: str, value: int = 1, tags: Mapping[str, str] | None = None
    ) -> None: ...

    def observe(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None: ...

    def gauge(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None: ...


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
class NullMetrics:
    def increment(
        self, name: str, value: int = 1, tags: Mapping[str, str] | None = None
    ) -> None:
        return None

    def observe(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None:
        return None

    def gauge(
        self, name: str, value: float, tags: Mapping[str, str] | None = None
    ) -> None:
        return None


@dataclass(frozen=True)
class Observability:
    logger: StructuredLogger
    metrics: MetricsRecorder

    def log_flushed(self, *, now: int, tasks_executed: int) -> None:
        self.logger.log(
            logging.DEBUG,
            "marbles.clock.flushed",
            {"now": now, "tasks_executed": tasks_executed},
        )

    def log_overflow(self, *, now: int, next_time: int, max_frames: int) -> None:
        self.logger.log(
            logging.WARNING,
            "marbles.clock.overflow",
            {"now": now, "next_time": next_time, "max_frames": max_frames},
        )

    def log_assertion_failed(self, *, label: str, mismatch_count: int) -> None:
        self.logger.log(
            logging.WARNING,
            "marbles.assertion.failed",
            {"label": label, "mismatch_count": mismatch_count},
        )

    def log_run_completed(self, *, expectations: int, failures: int, now: int) -> None:
        self.logger.log(
            logging.INFO,
            "marbles.run.completed",
            {"expectations": expectations, "failures": failures, "now": now},
        )

    def record_task_executed(self) -> None:
        self.metrics.increment("marbles.clock.tasks_executed")

    def record_pending(self, count: int) -> None:
        self.metrics.gauge("marbles.clock.pending", float(count))

    def record_assertion(self, *, passed: bool) -> None:
        self.metrics.increment(
            "marbles.assertions",
            tags={"status": "passed" if passed else "failed"},
        )


_OBSERVABILITY = Observability(logger=NullLogger(), metrics=NullMetrics())


def set_observability(observability: Observability) -> None:
    global _OBSERVABILITY
    _OBSERVABILITY = observability


def get_observability() -> Observability:
    return _OBSERVABILITY
