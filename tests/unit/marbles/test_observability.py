import logging
import unittest

from marbles.observability import NullLogger, NullMetrics, Observability, StdlibLogger


class RecordingLogger:
    def __init__(self) -> None:
        self.entries = []

    def log(self, level: int, message: str, fields) -> None:
        self.entries.append((level, message, dict(fields)))


class RecordingMetrics:
    def __init__(self) -> None:
        self.increments = []
        self.observations = []
        self.gauges = []

    def increment(self, name: str, value: int = 1, tags=None) -> None:
        self.increments.append((name, value, dict(tags or {})))

    def observe(self, name: str, value: float, tags=None) -> None:
        self.observations.append((name, value, dict(tags or {})))

    def gauge(self, name: str, value: float, tags=None) -> None:
        self.gauges.append((name, value, dict(tags or {})))


class CapturingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class TestObservability(unittest.TestCase):
    def test_assertion_logging_includes_label(self) -> None:
        logger = RecordingLogger()
        obs = Observability(logger=logger, metrics=RecordingMetrics())

        obs.log_assertion_failed(label="expectation #1", mismatch_count=3)

        level, message, fields = logger.entries[0]
        self.assertEqual(level, logging.WARNING)
        self.assertEqual(message, "marbles.assertion.failed")
        self.assertEqual(fields, {"label": "expectation #1", "mismatch_count": 3})

    def test_run_completed_is_info(self) -> None:
        logger = RecordingLogger()
        obs = Observability(logger=logger, metrics=RecordingMetrics())

        obs.log_run_completed(expectations=2, failures=0, now=40)

        self.assertEqual(logger.entries[0][0], logging.INFO)
        self.assertEqual(logger.entries[0][2]["now"], 40)

    def test_assertion_metrics_are_tagged(self) -> None:
        metrics = RecordingMetrics()
        obs = Observability(logger=RecordingLogger(), metrics=metrics)

        obs.record_assertion(passed=True)
        obs.record_assertion(passed=False)

        self.assertEqual(
            metrics.increments,
            [
                ("marbles.assertions", 1, {"status": "passed"}),
                ("marbles.assertions", 1, {"status": "failed"}),
            ],
        )

    def test_stdlib_logger_passes_fields_as_extra(self) -> None:
        handler = CapturingHandler()
        stdlib_logger = logging.getLogger("marbles.test.stdlib")
        stdlib_logger.addHandler(handler)
        stdlib_logger.setLevel(logging.DEBUG)
        try:
            StdlibLogger(stdlib_logger).log(logging.DEBUG, "marbles.clock.flushed", {"now": 3})
        finally:
            stdlib_logger.removeHandler(handler)

        self.assertEqual(handler.records[0].getMessage(), "marbles.clock.flushed")
        self.assertEqual(handler.records[0].fields, {"now": 3})

    def test_null_implementations_accept_calls(self) -> None:
        obs = Observability(logger=NullLogger(), metrics=NullMetrics())
        obs.log_flushed(now=0, tasks_executed=0)
        obs.record_pending(0)
        obs.record_task_executed()


if __name__ == "__main__":
    unittest.main()
