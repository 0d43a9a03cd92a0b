from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from marbles.observability import NullMetrics as MarblesNullMetrics
from marbles.observability import Observability as MarblesObservability
from marbles.observability import StdlibLogger as MarblesStdlibLogger
from marbles.observability import set_observability as set_marbles_observability
from streams.observability import Observability as StreamsObservability
from streams.observability import StdlibLogger as StreamsStdlibLogger
from streams.observability import set_observability as set_streams_observability

LOG_FILENAME = "streams.log"


@dataclass(frozen=True)
class ObservabilityBundle:
    streams: StreamsObservability
    marbles: MarblesObservability


class _FieldsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "fields"):
            record.fields = {}
        return True


def bootstrap_observability(*, log_dir: str) -> ObservabilityBundle:
    _setup_logging(log_dir=log_dir)
    streams_logger = logging.getLogger("streams")
    marbles_logger = logging.getLogger("marbles")

    bundle = ObservabilityBundle(
        streams=StreamsObservability(logger=StreamsStdlibLogger(streams_logger)),
        marbles=MarblesObservability(
            logger=MarblesStdlibLogger(marbles_logger),
            metrics=MarblesNullMetrics(),
        ),
    )
    set_streams_observability(bundle.streams)
    set_marbles_observability(bundle.marbles)
    return bundle


def _setup_logging(*, log_dir: str) -> None:
    os.makedirs(log_dir, exist_ok=True)
    fields_filter = _FieldsFilter()
    handler = logging.FileHandler(os.path.join(log_dir, LOG_FILENAME))
    handler.addFilter(fields_filter)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s | %(fields)s"
    )
    handler.setFormatter(formatter)
    logging.basicConfig(
        level=logging.INFO,
        handlers=[handler],
    )
    logging.getLogger("streams").setLevel(logging.DEBUG)
    logging.getLogger("marbles").setLevel(logging.DEBUG)
