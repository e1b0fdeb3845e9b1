"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - LessonId, VersionId, CourseId, CuId wrap str — ids are opaque strings on the wire
    - All valid states encoded as Enums — no raw string matching
    - COMPILER_PHASES order is the pipeline order (brief → package)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders and compare equal to their values
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

EventId = NewType("EventId", str)
CuId = NewType("CuId", str)
LessonId = NewType("LessonId", str)
VersionId = NewType("VersionId", str)
CourseId = NewType("CourseId", str)
SkillId = NewType("SkillId", str)
RunId = NewType("RunId", str)


# ─── Event Tags ──────────────────────────────────────────────────

class EventType(str, Enum):
    """Tag of every DomainEvent variant."""
    ATTEMPT_SUBMITTED = "AttemptSubmitted"
    STAGE_COMPLETED = "StageCompleted"
    CU_LOOP_CLOSED = "CULoopClosed"
    CONFIDENCE_UPDATED = "ConfidenceUpdated"
    BLOCK_INTERACTED = "BlockInteracted"
    HINT_REVEALED = "HintRevealed"
    LESSON_COMPLETED = "LessonCompleted"


class ConfidenceReason(str, Enum):
    TRANSFER_PASS = "transfer_pass"
    HINT_PENALTY = "hint_penalty"
    REGRESSION = "regression"
    SPACED_RECALL = "spaced_recall"
    LOOP_CLOSED = "loop_closed"


# ─── PDCA ────────────────────────────────────────────────────────

class Stage(str, Enum):
    """The four stages of a guided learning loop, in order."""
    PLAN = "plan"
    DO = "do"
    CHECK = "check"
    ACT = "act"


class StageStatus(str, Enum):
    LOCKED = "locked"
    ACTIVE = "active"
    COMPLETED = "completed"


# ─── Content Pipeline ────────────────────────────────────────────

class CompilerPhase(str, Enum):
    """The 5 ordered phases of the staged content pipeline."""
    BRIEF = "brief"
    SKELETON = "skeleton"
    BLOCKS = "blocks"
    VALIDATE = "validate"
    PACKAGE = "package"


COMPILER_PHASES: tuple[CompilerPhase, ...] = tuple(CompilerPhase)


class RunStatus(str, Enum):
    """CompilerRun lifecycle — frozen at the first terminal status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SourceProvider(str, Enum):
    MOCK_LLM = "mock_llm"
    PERPLEXITY = "perplexity"
    MANUAL_SEED = "manual_seed"


# ─── Read Models ─────────────────────────────────────────────────

class MasteryLevel(str, Enum):
    NOVICE = "novice"
    COMPETENT = "competent"
    EXPERT = "expert"


class Recommendation(str, Enum):
    OK = "ok"
    REFRESH_RECOMMENDED = "refresh-recommended"


class PracticeReason(str, Enum):
    HINT_DEPENDENT = "hint-dependent"
    STALE_RISK = "stale-risk"
    REGRESSION = "regression"


# ─── Policy Constants ────────────────────────────────────────────

BASE_CONFIDENCE_DELTA = 0.05
HINT_PENALTY_PER_HINT = 0.01
MIN_CONFIDENCE_DELTA = 0.01

HINT_DEPENDENCY_THRESHOLD = 2
STALE_RISK_PRIORITY = 5
REGRESSION_PRIORITY = 10

COMPETENT_RATIO = 0.33
MS_PER_DAY = 86_400_000

DEFAULT_REFRESH_POLICY_DAYS = 90
SEED_REFRESH_POLICY_DAYS = 365
