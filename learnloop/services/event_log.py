"""Event Log — append-only source of truth for all learner/content events.

Invariants:
    - Events are only ever appended; never mutated, reordered or removed
      (reset() clears everything and exists for test isolation only)
    - list_events() returns insertion order; the returned list is a copy
    - hydrate() replaces in-memory state with the persisted log
    - Projecting a hydrated log is identical to projecting the log that was flushed

Design Decisions:
    - Explicit open/flush boundary instead of persist-on-every-append: append() is
      synchronous and in-memory, flush() writes the whole log when dirty, and
      open_event_log() hydrates on enter and flushes on every exit path
    - No locking: concurrent writers must be serialized by the caller
      (e.g. one writer per learner session)
"""

import logging
from collections.abc import Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from pydantic import ValidationError as PydanticValidationError

from learnloop.core.errors import ValidationError
from learnloop.core.repository_protocols import KeyValueStore
from learnloop.schemas.events import (
    EVENT_CLASSES, DomainEvent, events_to_wire, parse_event, parse_events,
)

logger = logging.getLogger(__name__)

DEFAULT_EVENT_LOG_KEY = "learnloop_events"

EventFilter = Callable[[DomainEvent], bool]


class EventLog:
    """In-memory append-only event sequence backed by a key-value store."""

    def __init__(self, kv: KeyValueStore, storage_key: str = DEFAULT_EVENT_LOG_KEY):
        self._kv = kv
        self._key = storage_key
        self._events: list[DomainEvent] = []
        self._dirty = False

    def __len__(self) -> int:
        return len(self._events)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def append(self, events: DomainEvent | dict | Iterable[DomainEvent | dict]) -> None:
        """Append one event or a batch, in order. Raw dicts are validated first.

        A batch is all-or-nothing: if any item is malformed nothing is appended.
        """
        if isinstance(events, (dict, *EVENT_CLASSES)):
            events = [events]
        try:
            batch = [parse_event(e) for e in events]
        except PydanticValidationError as e:
            raise ValidationError(
                "Malformed event rejected by event log", errors=e.errors(),
            ) from e

        self._events.extend(batch)
        self._dirty = True
        for event in batch:
            logger.debug(
                "Appended %s", event.type,
                extra={"event_type": event.type},
            )

    def list_events(self, predicate: EventFilter | None = None) -> list[DomainEvent]:
        if predicate is None:
            return list(self._events)
        return [e for e in self._events if predicate(e)]

    async def hydrate(self) -> None:
        """Load the persisted log, replacing in-memory state."""
        raw = await self._kv.get(self._key)
        try:
            events = parse_events(raw or [])
        except PydanticValidationError as e:
            raise ValidationError(
                f"Persisted event log '{self._key}' is malformed", errors=e.errors(),
            ) from e
        self._events = events
        self._dirty = False
        logger.info(
            "Hydrated event log", extra={"event_count": len(events)},
        )

    async def flush(self) -> None:
        """Persist the full log if anything was appended since the last flush."""
        if not self._dirty:
            return
        await self._kv.set(self._key, self.to_wire())
        self._dirty = False
        logger.info(
            "Flushed event log", extra={"event_count": len(self._events)},
        )

    async def reset(self) -> None:
        """Clear the log and its persisted copy. Test isolation only."""
        self._events = []
        self._dirty = False
        await self._kv.remove(self._key)
        logger.warning("Event log reset")

    def to_wire(self) -> list[dict[str, Any]]:
        return events_to_wire(self._events)


@asynccontextmanager
async def open_event_log(
    kv: KeyValueStore, storage_key: str = DEFAULT_EVENT_LOG_KEY,
) -> AsyncIterator[EventLog]:
    """Hydrated EventLog whose appends are flushed on every exit path."""
    log = EventLog(kv, storage_key)
    await log.hydrate()
    try:
        yield log
    finally:
        await log.flush()
