"""PDCA State — one guided learning loop's Plan/Do/Check/Act progression, plus its actions.

Invariants:
    - Initial state: plan=active, do/check/act=locked, currentStage=plan
    - Stage status only moves forward: locked → active → completed
    - currentStage may point at any non-locked stage; jumping never changes a status
    - Terminal: all four stages completed
    - Frozen: transitions return a new PDCAState, the previous one is never mutated

Design Decisions:
    - Actions are frozen dataclasses forming a closed union (PDCAAction), matched
      structurally by the reducer; there is no string `type` dispatch
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from learnloop.core.domain_types import Stage, StageStatus


def _initial_stages() -> Mapping[Stage, StageStatus]:
    return MappingProxyType({
        Stage.PLAN: StageStatus.ACTIVE,
        Stage.DO: StageStatus.LOCKED,
        Stage.CHECK: StageStatus.LOCKED,
        Stage.ACT: StageStatus.LOCKED,
    })


@dataclass(frozen=True)
class PDCAState:
    """Per-loop state — pure value, no IO."""

    current_stage: Stage = Stage.PLAN
    stages: Mapping[Stage, StageStatus] = field(default_factory=_initial_stages)
    prediction: str = ""
    diagnosis: str = ""
    reflection: str = ""

    def status_of(self, stage: Stage) -> StageStatus:
        return self.stages[Stage(stage)]

    def with_statuses(self, **changes: StageStatus) -> Mapping[Stage, StageStatus]:
        """A new stage map with the given stages (by value name) overridden."""
        updated = dict(self.stages)
        for name, status in changes.items():
            updated[Stage(name)] = status
        return MappingProxyType(updated)

    @property
    def is_terminal(self) -> bool:
        return all(s == StageStatus.COMPLETED for s in self.stages.values())

    def to_snapshot(self) -> dict:
        """JSON-safe dict (camelCase keys, enum values) for UI hydration."""
        return {
            "currentStage": self.current_stage.value,
            "stages": {s.value: status.value for s, status in self.stages.items()},
            "prediction": self.prediction,
            "diagnosis": self.diagnosis,
            "reflection": self.reflection,
        }


def initial_pdca_state() -> PDCAState:
    return PDCAState()


def pdca_state_from_snapshot(data: Mapping | None) -> PDCAState:
    """Rebuild a PDCAState from to_snapshot() output. Missing keys fall back to defaults."""
    if not data:
        return PDCAState()
    stages = dict(_initial_stages())
    for name, status in (data.get("stages") or {}).items():
        stages[Stage(name)] = StageStatus(status)
    return PDCAState(
        current_stage=Stage(data.get("currentStage", Stage.PLAN.value)),
        stages=MappingProxyType(stages),
        prediction=data.get("prediction", ""),
        diagnosis=data.get("diagnosis", ""),
        reflection=data.get("reflection", ""),
    )


# --- Actions ------------------------------------------------------------------

@dataclass(frozen=True)
class UpdatePrediction:
    text: str


@dataclass(frozen=True)
class CommitPrediction:
    pass


@dataclass(frozen=True)
class SubmitDiagnosis:
    text: str


@dataclass(frozen=True)
class CompleteCheck:
    pass


@dataclass(frozen=True)
class UpdateReflection:
    text: str


@dataclass(frozen=True)
class CloseLoop:
    pass


@dataclass(frozen=True)
class JumpToStage:
    stage: Stage


# Content interactions flow through the reducer untouched (logging/analytics hooks)
@dataclass(frozen=True)
class BlockInteraction:
    block_id: str
    interaction: Any = None


@dataclass(frozen=True)
class HintReveal:
    block_id: str
    hint_index: int


@dataclass(frozen=True)
class LessonCompletion:
    lesson_id: str
    skill_id: str | None = None
    course_id: str | None = None


PDCAAction = (
    UpdatePrediction | CommitPrediction | SubmitDiagnosis | CompleteCheck
    | UpdateReflection | CloseLoop | JumpToStage
    | BlockInteraction | HintReveal | LessonCompletion
)
