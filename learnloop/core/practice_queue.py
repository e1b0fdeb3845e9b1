"""Practice Queue — merges hint dependency, staleness and regression into one priority list.

Invariants:
    - PURE: no IO, no clock; `now` is an argument
    - Entries are keyed by (lessonId, blockId); each key appears at most once
    - hint-dependent: >= 2 HintRevealed for (lessonId, blockId), priority = hint count
    - stale-risk: published lesson with now > staleAfter, priority 5, only if the
      lessonId has no entry yet (never displaces a hint-dependent entry)
    - regression: ConfidenceUpdated with reason == regression, priority 10, keyed by
      the regression lesson key (cuId unless the caller supplies a resolver)
    - Output sorted by priority descending; equal priorities keep insertion order
      (hint signals first in order of first hint, then stale lessons in input order,
      then regressions in log order)

Design Decisions:
    - Regression events carry no lessonId, so cuId stands in as the join key. The
      resolver argument exposes that join so a caller holding a cu → lesson map can
      supply it; the default preserves the cuId stand-in.
"""

from collections.abc import Callable, Iterable
from datetime import datetime

from learnloop.core.domain_types import (
    ConfidenceReason, CuId, EventType, PracticeReason,
    HINT_DEPENDENCY_THRESHOLD, REGRESSION_PRIORITY, STALE_RISK_PRIORITY,
)
from learnloop.core.read_models import is_stale
from learnloop.schemas.compiler import LessonVersion
from learnloop.schemas.events import ConfidenceUpdated, DomainEvent
from learnloop.schemas.read_models import PracticeQueueItem

QueueKey = tuple[str, str | None]
RegressionKeyResolver = Callable[[ConfidenceUpdated], str]


def cu_id_as_lesson_id(event: ConfidenceUpdated) -> CuId:
    """Default regression join key: the event's cuId stands in for a lessonId."""
    return CuId(event.payload.cu_id)


def count_hints(events: Iterable[DomainEvent]) -> dict[QueueKey, int]:
    """HintRevealed counts per (lessonId, blockId), in order of first occurrence."""
    counts: dict[QueueKey, int] = {}
    for event in events:
        if event.type != EventType.HINT_REVEALED.value:
            continue
        key = (event.payload.lesson_id, event.payload.block_id)
        counts[key] = counts.get(key, 0) + 1
    return counts


def project_practice_queue(
    events: Iterable[DomainEvent],
    published_lessons: Iterable[LessonVersion],
    now: datetime | str,
    regression_key: RegressionKeyResolver = cu_id_as_lesson_id,
) -> list[PracticeQueueItem]:
    events = list(events)
    queue: dict[QueueKey, PracticeQueueItem] = {}

    for (lesson_id, block_id), count in count_hints(events).items():
        if count >= HINT_DEPENDENCY_THRESHOLD:
            queue[(lesson_id, block_id)] = PracticeQueueItem(
                lesson_id=lesson_id,
                block_id=block_id,
                reason=PracticeReason.HINT_DEPENDENT,
                priority=count,
            )

    queued_lessons = {lesson_id for lesson_id, _ in queue}
    for version in published_lessons:
        if version.lesson_id in queued_lessons or not is_stale(version, now):
            continue
        queue[(version.lesson_id, None)] = PracticeQueueItem(
            lesson_id=version.lesson_id,
            reason=PracticeReason.STALE_RISK,
            priority=STALE_RISK_PRIORITY,
        )
        queued_lessons.add(version.lesson_id)

    for event in events:
        if (
            event.type != EventType.CONFIDENCE_UPDATED.value
            or event.payload.reason != ConfidenceReason.REGRESSION
        ):
            continue
        key = (regression_key(event), None)
        existing = queue.get(key)
        if existing is not None and existing.priority >= REGRESSION_PRIORITY:
            continue
        # dict assignment to an existing key keeps its original insertion slot
        queue[key] = PracticeQueueItem(
            lesson_id=key[0],
            reason=PracticeReason.REGRESSION,
            priority=REGRESSION_PRIORITY,
        )

    return sorted(queue.values(), key=lambda item: -item.priority)
