"""Progress Feed — newest-first activity cards derived from loop events.

Invariants:
    - PURE: derived from events only, one card per AttemptSubmitted / CULoopClosed /
      ConfidenceUpdated event, newest first (reverse log order)
    - Card ids are "derived-<eventId>" so a card is traceable to its source event
"""

from collections.abc import Iterable

from learnloop.core.domain_types import EventType
from learnloop.core.instants import round_half_up
from learnloop.schemas.events import DomainEvent
from learnloop.schemas.read_models import ProgressFeedItem

_FEED_TYPES = (
    EventType.ATTEMPT_SUBMITTED.value,
    EventType.CU_LOOP_CLOSED.value,
    EventType.CONFIDENCE_UPDATED.value,
)


def _card(event: DomainEvent) -> ProgressFeedItem:
    match event.type:
        case "CULoopClosed":
            title = "Completed CU Loop"
            details = "Successfully completed a full Plan-Do-Check-Act cycle."
            chips = ["Evidence Gained", "PDCA Closed"]
        case "AttemptSubmitted":
            title = f"Attempted Stage: {event.payload.stage.value}"
            details = "Submitted work for evaluation."
            chips = ["In Progress"]
        case _:
            delta = event.payload.delta
            sign = "+" if delta > 0 else ""
            title = "Confidence Updated"
            details = (
                f"Confidence adjusted by {sign}{round_half_up(delta * 100)}%. "
                f"Reason: {event.payload.reason.value}"
            )
            chips = ["Confidence", "Increased" if delta > 0 else "Decreased"]

    return ProgressFeedItem(
        id=f"derived-{event.id}",
        title=title,
        timestamp=event.timestamp,
        chips=chips,
        details=details,
    )


def project_progress_feed(events: Iterable[DomainEvent]) -> list[ProgressFeedItem]:
    feed_events = [e for e in events if e.type in _FEED_TYPES]
    return [_card(event) for event in reversed(feed_events)]
