"""Read Model Schemas — derived views returned by the projectors.

Invariants:
    - Never persisted: every instance is recomputed from the event log on request
    - Frozen: a projector result cannot be edited into a second source of truth
"""

from typing import Any

from pydantic import Field

from learnloop.core.domain_types import MasteryLevel, PracticeReason, Recommendation
from learnloop.schemas.base import FrozenWireModel
from learnloop.schemas.lesson import Citation, LessonBlock


class CourseProgress(FrozenWireModel):
    course_id: str
    percent_complete: int
    current_lesson_id: str | None
    next_lesson_id: str | None
    completed_lesson_ids: list[str] = Field(default_factory=list)
    started_at: str = ""
    last_activity_at: str = ""

    @property
    def is_complete(self) -> bool:
        return self.percent_complete == 100


class SkillMastery(FrozenWireModel):
    skill_id: str
    mastery_level: MasteryLevel
    courses_completed: int
    total_courses: int


class StalenessReport(FrozenWireModel):
    lesson_id: str
    version_id: str
    stale_after: str | None = None
    is_stale: bool
    days_since_stale: int
    recommendation: Recommendation


class PracticeQueueItem(FrozenWireModel):
    lesson_id: str
    block_id: str | None = None
    reason: PracticeReason
    priority: int


class ProgressFeedItem(FrozenWireModel):
    id: str
    title: str
    timestamp: str
    chips: list[str] = Field(default_factory=list)
    details: str


class TutorContext(FrozenWireModel):
    """Scoped context handed to a tutoring collaborator for one block."""
    block_content: LessonBlock
    learner_attempt: dict[str, Any] | None = None
    rubric: list[str] = Field(default_factory=list)
    hint_ladder: list[str] = Field(default_factory=list)
    hints_revealed: int = 0
    citations: list[Citation] = Field(default_factory=list)
