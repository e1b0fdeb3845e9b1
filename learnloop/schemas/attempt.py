"""Attempt Schema — a learner's submitted work for one PDCA stage.

Invariants:
    - hintsUsed is a non-negative integer
    - stage is one of plan/do/check/act
"""

from typing import Any

from pydantic import Field

from learnloop.core.domain_types import Stage
from learnloop.schemas.base import IsoInstant, WireModel


class AttemptResult(WireModel):
    correct: bool
    score: float | None = None


class Attempt(WireModel):
    """Command input for submit_attempt_command."""
    id: str
    user_id: str
    skill_id: str | None = None
    course_id: str | None = None
    lesson_id: str | None = None
    cu_id: str
    block_id: str | None = None
    stage: Stage
    inputs: dict[str, Any] = Field(default_factory=dict)
    result: AttemptResult | None = None
    hints_used: int = Field(default=0, ge=0)
    misconception_tags: list[str] = Field(default_factory=list)
    timestamp: IsoInstant | None = None
