"""Structured Logging — record formatting and handler installation for learnloop.

Invariants:
    - Every JSON line carries timestamp, level, logger and message
    - The timestamp is the record's creation instant in the persisted ISO form
      (millisecond precision, trailing "Z"), so log lines sort with stored events
    - Domain context (event_type, lesson_id, version_id, run_id, phase, ...) is
      emitted only when a call site passed it via `extra=`
    - At most one learnloop handler is attached to the root logger

Design Decisions:
    - stdlib logging only; context travels through `extra=` rather than adapters
    - Text mode appends the same context as key=value so local runs stay greppable
    - setup_logging is invoked by bootstrap.open_container, never at import time
"""

import json
import logging
from datetime import datetime, timezone

from learnloop.core.instants import to_iso

CONTEXT_FIELDS = (
    "event_type", "event_count", "lesson_id", "version_id",
    "run_id", "phase", "error_code",
)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def record_context(record: logging.LogRecord) -> dict:
    """The subset of CONTEXT_FIELDS set on this record."""
    context = {}
    for field in CONTEXT_FIELDS:
        value = getattr(record, field, None)
        if value is not None:
            context[field] = value
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "timestamp": to_iso(created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        head, sep, rest = line.partition("\n")
        return f"{head} [{pairs}]{sep}{rest}"


class LearnLoopHandler(logging.StreamHandler):
    """Marker subclass so setup_logging can find and replace its own handler."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> LearnLoopHandler:
    for existing in list(logging.root.handlers):
        if isinstance(existing, LearnLoopHandler):
            logging.root.removeHandler(existing)

    handler = LearnLoopHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(_LEVELS.get(level.upper(), logging.INFO))
    return handler
