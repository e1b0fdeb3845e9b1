"""Read-Model Projectors — pure functions from the event log to derived views.

Invariants:
    - All functions are PURE: no IO, no async, no clock, no shared mutable state
    - "now" is always an explicit argument
    - Never raise on missing data: absence maps to empty lists, zero counts or None
    - Same inputs → structurally identical outputs on every call

Design Decisions:
    - Replaying the whole log per request instead of caching: derived views are never
      a second source of truth, so a crash between writes is recovered by re-projection
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from learnloop.core.domain_types import (
    CourseId, EventType, LessonId, MasteryLevel, Recommendation, SkillId,
    COMPETENT_RATIO, MS_PER_DAY,
)
from learnloop.core.instants import millis_between, parse_instant, round_half_up
from learnloop.schemas.compiler import LessonVersion
from learnloop.schemas.events import DomainEvent
from learnloop.schemas.read_models import CourseProgress, SkillMastery, StalenessReport

_COURSE_EVENT_TYPES = (EventType.LESSON_COMPLETED.value, EventType.ATTEMPT_SUBMITTED.value)


# --- Course progress ----------------------------------------------------------

def _course_events(events: Iterable[DomainEvent], course_id: str) -> list[DomainEvent]:
    return [
        e for e in events
        if e.type in _COURSE_EVENT_TYPES and e.payload.course_id == course_id
    ]


def _activity_window(events: Sequence[DomainEvent]) -> tuple[str, str]:
    """Earliest and latest timestamp among `events`, or ("", "")."""
    if not events:
        return "", ""
    # min/max keep the first of equal instants, so ties resolve to log order
    earliest = min(events, key=lambda e: parse_instant(e.timestamp))
    latest = max(reversed(events), key=lambda e: parse_instant(e.timestamp))
    return earliest.timestamp, latest.timestamp


def project_course_progress(
    events: Iterable[DomainEvent],
    course_id: CourseId,
    lesson_order: Sequence[LessonId],
) -> CourseProgress:
    """Project LessonCompleted/AttemptSubmitted events of one course into progress.

    currentLessonId is the first lesson in `lesson_order` not yet completed;
    nextLessonId the entry after it. Both are None when everything is done
    or the order is empty.

    percentComplete is 100 once no current lesson remains, except for an empty
    `lesson_order`, which reports 0 (nothing to complete is not "complete").
    """
    course_events = _course_events(events, course_id)

    completed: list[str] = []
    for event in course_events:
        if event.type == EventType.LESSON_COMPLETED.value:
            lesson_id = event.payload.lesson_id
            if lesson_id not in completed:
                completed.append(lesson_id)

    completed_set = set(completed)
    current_index = next(
        (i for i, lesson_id in enumerate(lesson_order) if lesson_id not in completed_set),
        None,
    )
    current_lesson_id = lesson_order[current_index] if current_index is not None else None
    next_lesson_id = None
    if current_index is not None and current_index + 1 < len(lesson_order):
        next_lesson_id = lesson_order[current_index + 1]

    if not lesson_order:
        percent = 0
    elif current_lesson_id is None:
        percent = 100
    else:
        done_in_order = sum(1 for lesson_id in lesson_order if lesson_id in completed_set)
        percent = round_half_up(done_in_order / len(lesson_order) * 100)

    started_at, last_activity_at = _activity_window(course_events)

    return CourseProgress(
        course_id=course_id,
        percent_complete=percent,
        current_lesson_id=current_lesson_id,
        next_lesson_id=next_lesson_id,
        completed_lesson_ids=completed,
        started_at=started_at,
        last_activity_at=last_activity_at,
    )


# --- Skill mastery ------------------------------------------------------------

def mastery_for_ratio(ratio: float) -> MasteryLevel:
    if ratio >= 1:
        return MasteryLevel.EXPERT
    if ratio >= COMPETENT_RATIO:
        return MasteryLevel.COMPETENT
    return MasteryLevel.NOVICE


def project_skill_mastery(
    skill_id: SkillId,
    course_ids: Sequence[CourseId],
    course_progress: Mapping[str, CourseProgress],
) -> SkillMastery:
    """Mastery from the share of a skill's courses at 100%. Unknown courses count as 0%."""
    total = len(course_ids)
    completed = sum(
        1 for course_id in course_ids
        if course_id in course_progress and course_progress[course_id].percent_complete == 100
    )
    ratio = completed / total if total else 0.0
    return SkillMastery(
        skill_id=skill_id,
        mastery_level=mastery_for_ratio(ratio),
        courses_completed=completed,
        total_courses=total,
    )


# --- Staleness ----------------------------------------------------------------

def is_stale(version: LessonVersion, now: datetime | str) -> bool:
    if not version.stale_after:
        return False
    return parse_instant(now) > parse_instant(version.stale_after)


def project_staleness_report(
    lesson_versions: Iterable[LessonVersion],
    now: datetime | str,
) -> list[StalenessReport]:
    """One report per version, in input order."""
    reports = []
    for version in lesson_versions:
        if not version.stale_after:
            reports.append(StalenessReport(
                lesson_id=version.lesson_id,
                version_id=version.id,
                is_stale=False,
                days_since_stale=0,
                recommendation=Recommendation.OK,
            ))
            continue

        stale = is_stale(version, now)
        days = round_half_up(millis_between(version.stale_after, now) / MS_PER_DAY)
        reports.append(StalenessReport(
            lesson_id=version.lesson_id,
            version_id=version.id,
            stale_after=version.stale_after,
            is_stale=stale,
            days_since_stale=days,
            recommendation=(
                Recommendation.REFRESH_RECOMMENDED if stale else Recommendation.OK
            ),
        ))
    return reports
