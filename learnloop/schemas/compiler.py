"""Compiler Schemas — pipeline artifacts, CompilerRun snapshots, LessonVersion records.

Invariants:
    - CompilerRun.phase is absent only while status == pending
    - CompilerArtifacts slots fill monotonically (brief → skeleton → draftLesson → validation)
    - LessonVersion.specHash is stamped by the versioning store, never trusted from input
    - refreshPolicyDays >= 0; every instant field is an IsoInstant (validated ISO-8601 string)
"""

from pydantic import Field

from learnloop.core.domain_types import (
    CompilerPhase, RunStatus, SourceProvider, Stage, DEFAULT_REFRESH_POLICY_DAYS,
)
from learnloop.schemas.base import IsoInstant, WireModel
from learnloop.schemas.lesson import LessonSpec


# --- Artifacts ----------------------------------------------------------------

class BriefSource(WireModel):
    id: str
    title: str
    url: str | None = None
    snippet: str | None = None


class ResearchBrief(WireModel):
    topic: str
    objectives: list[str] = Field(default_factory=list)
    misconceptions: list[str] = Field(default_factory=list)
    key_terms: list[str] = Field(default_factory=list)
    sources: list[BriefSource] = Field(default_factory=list)


class PDCAStructure(WireModel):
    plan: str
    do: str
    check: str
    act: str


class BlockOutlineItem(WireModel):
    stage: Stage
    type: str
    goal: str


class LessonSkeleton(WireModel):
    pdca_structure: PDCAStructure
    block_outline: list[BlockOutlineItem] = Field(default_factory=list)


class ValidationReport(WireModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    citation_coverage: float = Field(ge=0.0, le=1.0)


class CompilerArtifacts(WireModel):
    brief: ResearchBrief | None = None
    skeleton: LessonSkeleton | None = None
    draft_lesson: LessonSpec | None = None
    validation: ValidationReport | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.brief, self.skeleton, self.draft_lesson, self.validation)


class RunProvenance(WireModel):
    model: str
    prompt_bundle_version: str


class CompilerRun(WireModel):
    """One snapshot of a staged pipeline execution."""
    id: str
    timestamp: IsoInstant
    topic: str
    phase: CompilerPhase | None = None
    status: RunStatus
    artifacts: CompilerArtifacts = Field(default_factory=CompilerArtifacts)
    provenance: RunProvenance
    error: dict | None = None  # LearnLoopError.to_response() of the failing phase

    @property
    def is_terminal(self) -> bool:
        return self.status in (RunStatus.COMPLETED, RunStatus.FAILED)


# --- Versioning ---------------------------------------------------------------

class LessonVersion(WireModel):
    """Immutable, content-hashed snapshot of a lesson under a stable lessonId."""
    id: str
    lesson_id: str
    spec: LessonSpec
    compiler_run_id: str
    created_at: IsoInstant
    published_at: IsoInstant | None = None

    spec_hash: str | None = None

    source_provider: SourceProvider
    refresh_policy_days: int = Field(default=DEFAULT_REFRESH_POLICY_DAYS, ge=0)
    stale_after: IsoInstant | None = None
    generated_at: IsoInstant | None = None


