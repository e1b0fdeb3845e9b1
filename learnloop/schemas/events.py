"""Domain Event Schemas — the tagged union stored in the event log.

Invariants:
    - Every variant carries id, type (tag), timestamp (IsoInstant), userId, payload
    - A timestamp that does not parse as ISO-8601 is a malformed payload
    - Events are frozen: once constructed they cannot be mutated
    - parse_event / parse_events reject unknown tags and malformed payloads

Design Decisions:
    - pydantic discriminated union on `type`: exhaustive variant set, one validator entry point
    - timestamp kept as the original ISO string so a hydrated log re-serializes byte-identically
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from learnloop.core.domain_types import ConfidenceReason, Stage
from learnloop.schemas.base import FrozenWireModel, IsoInstant


class _BaseEvent(FrozenWireModel):
    id: str
    timestamp: IsoInstant
    user_id: str


# --- Payloads -----------------------------------------------------------------

class AttemptSubmittedPayload(FrozenWireModel):
    cu_id: str
    skill_id: str | None = None
    course_id: str | None = None
    lesson_id: str | None = None
    block_id: str | None = None
    stage: Stage
    inputs: dict[str, Any] = Field(default_factory=dict)


class StageCompletedPayload(FrozenWireModel):
    cu_id: str
    stage: Stage


class CULoopClosedPayload(FrozenWireModel):
    cu_id: str
    evidence_gained: bool


class ConfidenceUpdatedPayload(FrozenWireModel):
    cu_id: str
    delta: float
    reason: ConfidenceReason


class BlockInteractedPayload(FrozenWireModel):
    lesson_id: str
    block_id: str
    interaction: Any = None


class HintRevealedPayload(FrozenWireModel):
    lesson_id: str
    block_id: str
    hint_index: int = Field(ge=0)


class LessonCompletedPayload(FrozenWireModel):
    skill_id: str | None = None
    course_id: str | None = None
    lesson_id: str


# --- Variants -----------------------------------------------------------------

class AttemptSubmitted(_BaseEvent):
    type: Literal["AttemptSubmitted"] = "AttemptSubmitted"
    payload: AttemptSubmittedPayload


class StageCompleted(_BaseEvent):
    type: Literal["StageCompleted"] = "StageCompleted"
    payload: StageCompletedPayload


class CULoopClosed(_BaseEvent):
    type: Literal["CULoopClosed"] = "CULoopClosed"
    payload: CULoopClosedPayload


class ConfidenceUpdated(_BaseEvent):
    type: Literal["ConfidenceUpdated"] = "ConfidenceUpdated"
    payload: ConfidenceUpdatedPayload


class BlockInteracted(_BaseEvent):
    type: Literal["BlockInteracted"] = "BlockInteracted"
    payload: BlockInteractedPayload


class HintRevealed(_BaseEvent):
    type: Literal["HintRevealed"] = "HintRevealed"
    payload: HintRevealedPayload


class LessonCompleted(_BaseEvent):
    type: Literal["LessonCompleted"] = "LessonCompleted"
    payload: LessonCompletedPayload


DomainEvent = Annotated[
    Union[
        AttemptSubmitted, StageCompleted, CULoopClosed, ConfidenceUpdated,
        BlockInteracted, HintRevealed, LessonCompleted,
    ],
    Field(discriminator="type"),
]

EVENT_CLASSES: tuple[type, ...] = (
    AttemptSubmitted, StageCompleted, CULoopClosed, ConfidenceUpdated,
    BlockInteracted, HintRevealed, LessonCompleted,
)

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(DomainEvent)
_EVENT_LIST_ADAPTER: TypeAdapter = TypeAdapter(list[DomainEvent])


def parse_event(data: Any) -> DomainEvent:
    """Validate one raw event (dict or model). Raises pydantic.ValidationError."""
    return _EVENT_ADAPTER.validate_python(data)


def parse_events(data: Any) -> list[DomainEvent]:
    """Validate a raw event list (as persisted). Raises pydantic.ValidationError."""
    return _EVENT_LIST_ADAPTER.validate_python(data)


def events_to_wire(events: list[DomainEvent]) -> list[dict]:
    """Serialize events to their persisted JSON form, in order."""
    return [event.to_wire() for event in events]
