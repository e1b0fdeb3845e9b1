"""PDCA Reducer — guarded finite-state transitions for one learning loop.

Invariants:
    - PURE: (state, action) → state; no IO, no clock, never raises
    - A failed guard returns the SAME state object, unchanged
    - Unknown actions and content-interaction actions pass through unchanged

Guards:
    COMMIT_PREDICTION  prediction non-blank,     plan→completed, do→active
                       plan is active
    SUBMIT_DIAGNOSIS   do is active              do→completed, check→active
    COMPLETE_CHECK     check is active           check→completed, act→active
    CLOSE_LOOP         act is active             act→completed (terminal)
    JUMP_TO_STAGE      target is not locked      currentStage only
"""

from collections.abc import Iterable
from dataclasses import replace
from functools import reduce

from learnloop.core.domain_types import Stage, StageStatus
from learnloop.core.pdca_state import (
    PDCAAction, PDCAState, initial_pdca_state,
    UpdatePrediction, CommitPrediction, SubmitDiagnosis, CompleteCheck,
    UpdateReflection, CloseLoop, JumpToStage,
)

ACTIVE = StageStatus.ACTIVE
COMPLETED = StageStatus.COMPLETED


def pdca_reducer(state: PDCAState, action: PDCAAction) -> PDCAState:
    match action:
        case UpdatePrediction(text=text):
            return replace(state, prediction=text)

        case CommitPrediction():
            if not state.prediction.strip() or state.status_of(Stage.PLAN) != ACTIVE:
                return state
            return replace(
                state,
                current_stage=Stage.DO,
                stages=state.with_statuses(plan=COMPLETED, do=ACTIVE),
            )

        case SubmitDiagnosis(text=text):
            if state.status_of(Stage.DO) != ACTIVE:
                return state
            return replace(
                state,
                diagnosis=text,
                current_stage=Stage.CHECK,
                stages=state.with_statuses(do=COMPLETED, check=ACTIVE),
            )

        case CompleteCheck():
            if state.status_of(Stage.CHECK) != ACTIVE:
                return state
            return replace(
                state,
                current_stage=Stage.ACT,
                stages=state.with_statuses(check=COMPLETED, act=ACTIVE),
            )

        case UpdateReflection(text=text):
            return replace(state, reflection=text)

        case CloseLoop():
            if state.status_of(Stage.ACT) != ACTIVE:
                return state
            return replace(state, stages=state.with_statuses(act=COMPLETED))

        case JumpToStage(stage=stage):
            if state.status_of(stage) == StageStatus.LOCKED:
                return state
            return replace(state, current_stage=Stage(stage))

        case _:
            return state


def replay_pdca(
    actions: Iterable[PDCAAction], initial: PDCAState | None = None,
) -> PDCAState:
    """Fold an action sequence over the reducer (default: fresh initial state)."""
    return reduce(pdca_reducer, actions, initial or initial_pdca_state())
