"""Test Factories — builders for lessons, versions, attempts and events.

Invariants:
    - Every builder returns a validated model (bad test data fails loudly at build time)
    - Defaults are fixed values: two calls with the same arguments build equal models
    - Event ids default to a counter-free value derived from the arguments
"""

from learnloop.core.domain_types import ConfidenceReason, SourceProvider, Stage
from learnloop.schemas.attempt import Attempt
from learnloop.schemas.compiler import LessonVersion
from learnloop.schemas.events import (
    AttemptSubmitted, AttemptSubmittedPayload,
    ConfidenceUpdated, ConfidenceUpdatedPayload,
    CULoopClosed, CULoopClosedPayload,
    HintRevealed, HintRevealedPayload,
    LessonCompleted, LessonCompletedPayload,
)
from learnloop.schemas.lesson import (
    Citation, ExerciseBlock, ExplainerBlock, LessonSpec, LessonStages,
    PredictionBlock, ReflectionBlock, StageContent, TodoBlock,
)

T0 = "2026-01-01T00:00:00.000Z"
USER = "user-1"


# --- Lessons ------------------------------------------------------------------

def make_lesson(lesson_id: str = "lesson-1", title: str = "Intro to Loops", **overrides) -> LessonSpec:
    data = dict(
        id=lesson_id,
        version="v1.0.0",
        title=title,
        topic="loops",
        description="Iterate with for and while",
        difficulty="beginner",
        estimated_duration=15,
        tags=["python"],
        cu_ids=["cu-1"],
        stages=LessonStages(
            plan=StageContent(blocks=[
                ExplainerBlock(id="b-explain", markdown="Loops repeat work [cit-1]"),
                PredictionBlock(id="b-predict", prompt="What will this print?"),
            ]),
            do=StageContent(blocks=[
                ExerciseBlock(
                    id="b-exercise",
                    prompt="Sum a list with a loop",
                    hints=["Start with total = 0", "Add each item", "Return total"],
                    remediation_targets=["off-by-one"],
                ),
            ]),
            check=StageContent(blocks=[
                ReflectionBlock(id="b-reflect", prompt="Compare with your prediction"),
            ]),
            act=StageContent(blocks=[TodoBlock(id="b-todo", text="Refactor one loop")]),
        ),
        citations=[
            Citation(id="cit-1", text="Python tutorial"),
            Citation(id="cit-2", text="Unrelated reference"),
        ],
    )
    data.update(overrides)
    return LessonSpec(**data)


def make_version(
    version_id: str = "ver-1",
    lesson_id: str = "lesson-1",
    created_at: str = T0,
    title: str = "Intro to Loops",
    **overrides,
) -> LessonVersion:
    data = dict(
        id=version_id,
        lesson_id=lesson_id,
        spec=make_lesson(lesson_id, title=title),
        compiler_run_id="run-1",
        created_at=created_at,
        source_provider=SourceProvider.MOCK_LLM,
        refresh_policy_days=90,
    )
    data.update(overrides)
    return LessonVersion(**data)


# --- Attempts -----------------------------------------------------------------

def make_attempt(stage: Stage = Stage.DO, hints_used: int = 0, **overrides) -> Attempt:
    data = dict(
        id="att-1",
        user_id=USER,
        cu_id="cu-1",
        course_id="course-1",
        lesson_id="lesson-1",
        block_id="b-exercise",
        stage=stage,
        inputs={"code": "total = sum(xs)"},
        hints_used=hints_used,
    )
    data.update(overrides)
    return Attempt(**data)


# --- Events -------------------------------------------------------------------

def hint_revealed(lesson_id: str, block_id: str, index: int = 0, event_id: str | None = None,
                  timestamp: str = T0) -> HintRevealed:
    return HintRevealed(
        id=event_id or f"evt-hint-{lesson_id}-{block_id}-{index}",
        timestamp=timestamp,
        user_id=USER,
        payload=HintRevealedPayload(lesson_id=lesson_id, block_id=block_id, hint_index=index),
    )


def lesson_completed(lesson_id: str, course_id: str = "course-1",
                     timestamp: str = T0, event_id: str | None = None) -> LessonCompleted:
    return LessonCompleted(
        id=event_id or f"evt-done-{lesson_id}-{timestamp}",
        timestamp=timestamp,
        user_id=USER,
        payload=LessonCompletedPayload(course_id=course_id, lesson_id=lesson_id),
    )


def attempt_submitted(lesson_id: str = "lesson-1", block_id: str = "b-exercise",
                      course_id: str = "course-1", stage: Stage = Stage.DO,
                      inputs: dict | None = None, timestamp: str = T0,
                      event_id: str | None = None) -> AttemptSubmitted:
    return AttemptSubmitted(
        id=event_id or f"evt-att-{lesson_id}-{block_id}-{timestamp}",
        timestamp=timestamp,
        user_id=USER,
        payload=AttemptSubmittedPayload(
            cu_id="cu-1", course_id=course_id, lesson_id=lesson_id,
            block_id=block_id, stage=stage, inputs=inputs or {},
        ),
    )


def confidence_updated(cu_id: str = "cu-1", delta: float = 0.05,
                       reason: ConfidenceReason = ConfidenceReason.LOOP_CLOSED,
                       event_id: str | None = None, timestamp: str = T0) -> ConfidenceUpdated:
    return ConfidenceUpdated(
        id=event_id or f"evt-conf-{cu_id}-{reason.value}",
        timestamp=timestamp,
        user_id=USER,
        payload=ConfidenceUpdatedPayload(cu_id=cu_id, delta=delta, reason=reason),
    )


def loop_closed(cu_id: str = "cu-1", event_id: str | None = None,
                timestamp: str = T0) -> CULoopClosed:
    return CULoopClosed(
        id=event_id or f"evt-closed-{cu_id}",
        timestamp=timestamp,
        user_id=USER,
        payload=CULoopClosedPayload(cu_id=cu_id, evidence_gained=True),
    )
