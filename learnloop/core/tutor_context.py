"""Tutor Context — scoped view of one lesson block for a tutoring collaborator.

Invariants:
    - PURE: no store access, no clock; events are assumed in log (chronological) order
    - hintsRevealed counts HintRevealed events for exactly (lesson, block)
    - learnerAttempt is the inputs of the LAST AttemptSubmitted for (lesson, block)
    - Raises ResourceNotFoundError when the block is not part of the lesson
"""

from collections.abc import Iterable

from learnloop.core.domain_types import EventType
from learnloop.core.errors import ErrorContext, ResourceNotFoundError
from learnloop.schemas.events import DomainEvent
from learnloop.schemas.lesson import Citation, LessonBlock, LessonSpec
from learnloop.schemas.read_models import TutorContext

_TEXT_FIELDS = (
    "markdown", "content", "caption", "title", "description",
    "prompt", "question", "text", "solution",
)


def _block_text(block: LessonBlock) -> str:
    parts = [getattr(block, name, None) for name in _TEXT_FIELDS]
    return " ".join(p for p in parts if isinstance(p, str))


def scope_citations_to_block(block: LessonBlock, citations: list[Citation]) -> list[Citation]:
    """Citations whose id appears in the block's text; all citations when none do."""
    text = _block_text(block)
    referenced = [c for c in citations if c.id in text]
    return referenced or list(citations)


def build_tutor_context(
    lesson: LessonSpec,
    block_id: str,
    events: Iterable[DomainEvent],
) -> TutorContext:
    block = lesson.find_block(block_id)
    if block is None:
        raise ResourceNotFoundError(
            "LessonBlock", block_id, ErrorContext(lesson_id=lesson.id),
        )

    hints_revealed = 0
    learner_attempt = None
    for event in events:
        if event.type == EventType.HINT_REVEALED.value:
            if event.payload.lesson_id == lesson.id and event.payload.block_id == block_id:
                hints_revealed += 1
        elif event.type == EventType.ATTEMPT_SUBMITTED.value:
            if event.payload.lesson_id == lesson.id and event.payload.block_id == block_id:
                learner_attempt = dict(event.payload.inputs)

    return TutorContext(
        block_content=block,
        learner_attempt=learner_attempt,
        rubric=list(block.remediation_targets or []),
        hint_ladder=list(block.hints) if block.type == "exercise" else [],
        hints_revealed=hints_revealed,
        citations=scope_citations_to_block(block, lesson.citations or []),
    )
