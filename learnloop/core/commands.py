"""Command Handlers — turn a learner's submitted attempt into domain events.

Invariants:
    - Commands are PURE with respect to state: they never read or append to the event log
    - submit_attempt_command always emits exactly one AttemptSubmitted
    - stage == act additionally emits ConfidenceUpdated then CULoopClosed, in that order
    - confidence delta = max(0.01, 0.05 - hintsUsed * 0.01); no clock or randomness involved

Design Decisions:
    - Ids and timestamps are the only impure inputs; both are injectable for replay tests
"""

from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from learnloop.core.domain_types import (
    ConfidenceReason, EventId, Stage,
    BASE_CONFIDENCE_DELTA, HINT_PENALTY_PER_HINT, MIN_CONFIDENCE_DELTA,
)
from learnloop.core.instants import to_iso, utc_now
from learnloop.schemas.attempt import Attempt
from learnloop.schemas.events import (
    AttemptSubmitted, AttemptSubmittedPayload,
    ConfidenceUpdated, ConfidenceUpdatedPayload,
    CULoopClosed, CULoopClosedPayload,
    DomainEvent,
)


def _new_event_id() -> EventId:
    return EventId(f"evt-{uuid4().hex}")


def confidence_delta(hints_used: int) -> float:
    """Deterministic heuristic: base delta minus a per-hint penalty, floored."""
    # round() strips float noise such as 0.05 - 3 * 0.01 == 0.020000000000000004
    return max(
        MIN_CONFIDENCE_DELTA,
        round(BASE_CONFIDENCE_DELTA - hints_used * HINT_PENALTY_PER_HINT, 10),
    )


def confidence_reason(hints_used: int) -> ConfidenceReason:
    if hints_used > 0:
        return ConfidenceReason.HINT_PENALTY
    return ConfidenceReason.LOOP_CLOSED


def submit_attempt_command(
    attempt: Attempt,
    now: datetime | None = None,
    id_factory: Callable[[], str] = _new_event_id,
) -> list[DomainEvent]:
    """Produce the events recording `attempt`. Never fails on a validated Attempt."""
    timestamp = to_iso(now or utc_now())

    events: list[DomainEvent] = [
        AttemptSubmitted(
            id=id_factory(),
            timestamp=timestamp,
            user_id=attempt.user_id,
            payload=AttemptSubmittedPayload(
                cu_id=attempt.cu_id,
                skill_id=attempt.skill_id,
                course_id=attempt.course_id,
                lesson_id=attempt.lesson_id,
                block_id=attempt.block_id,
                stage=attempt.stage,
                inputs=attempt.inputs,
            ),
        ),
    ]

    if attempt.stage != Stage.ACT:
        return events

    events.append(ConfidenceUpdated(
        id=id_factory(),
        timestamp=timestamp,
        user_id=attempt.user_id,
        payload=ConfidenceUpdatedPayload(
            cu_id=attempt.cu_id,
            delta=confidence_delta(attempt.hints_used),
            reason=confidence_reason(attempt.hints_used),
        ),
    ))
    events.append(CULoopClosed(
        id=id_factory(),
        timestamp=timestamp,
        user_id=attempt.user_id,
        payload=CULoopClosedPayload(cu_id=attempt.cu_id, evidence_gained=True),
    ))
    return events
