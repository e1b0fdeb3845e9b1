"""Lesson Schemas — the authored content a LessonVersion snapshots.

Invariants:
    - LessonBlock is a tagged union on `type`; unknown block types are rejected
    - Block order inside a stage is semantic (never re-sorted, not even for hashing)
    - schemaVersion is pinned to "1.0.0"
"""

from typing import Annotated, Literal, Union

from pydantic import Field

from learnloop.core.domain_types import Stage
from learnloop.schemas.base import WireModel


# --- Primitives ---------------------------------------------------------------

class Citation(WireModel):
    id: str
    text: str
    url: str | None = None
    source_id: str | None = None


class Asset(WireModel):
    id: str
    type: Literal["image", "video", "diagram", "code"]
    url: str
    caption: str | None = None


# --- Blocks -------------------------------------------------------------------

class _BaseBlock(WireModel):
    id: str
    remediation_targets: list[str] | None = None  # misconception tags addressed


class ExplainerBlock(_BaseBlock):
    type: Literal["explainer"] = "explainer"
    markdown: str
    asset_id: str | None = None


class DiagramBlock(_BaseBlock):
    type: Literal["diagram"] = "diagram"
    diagram_type: Literal["mermaid", "svg"]
    content: str
    caption: str | None = None


class ScenarioBlock(_BaseBlock):
    type: Literal["scenario"] = "scenario"
    title: str
    description: str
    asset_id: str | None = None


class PredictionBlock(_BaseBlock):
    type: Literal["prediction"] = "prediction"
    prompt: str
    placeholder: str | None = None
    correct_answer_reveal: str | None = None


class ExerciseValidation(WireModel):
    type: Literal["regex", "llm", "manual"]
    rule: str | None = None


class ExerciseBlock(_BaseBlock):
    type: Literal["exercise"] = "exercise"
    prompt: str
    initial_code: str | None = None
    language: str | None = None
    hints: list[str] = Field(default_factory=list)  # hint ladder, revealed in order
    solution: str | None = None
    validation: ExerciseValidation | None = None


class QuizOption(WireModel):
    id: str
    text: str
    is_correct: bool
    feedback: str | None = None


class QuizBlock(_BaseBlock):
    type: Literal["quiz"] = "quiz"
    question: str
    options: list[QuizOption]


class ReflectionBlock(_BaseBlock):
    type: Literal["reflection"] = "reflection"
    prompt: str


class TodoBlock(_BaseBlock):
    type: Literal["todo"] = "todo"
    text: str


LessonBlock = Annotated[
    Union[
        ExplainerBlock, DiagramBlock, ScenarioBlock, PredictionBlock,
        ExerciseBlock, QuizBlock, ReflectionBlock, TodoBlock,
    ],
    Field(discriminator="type"),
]


# --- Lesson spec --------------------------------------------------------------

class StageContent(WireModel):
    blocks: list[LessonBlock] = Field(default_factory=list)


class LessonStages(WireModel):
    plan: StageContent
    do: StageContent
    check: StageContent
    act: StageContent

    def for_stage(self, stage: Stage) -> StageContent:
        return getattr(self, Stage(stage).value)


class LessonProvenance(WireModel):
    generator_model: str
    prompt_bundle_version: str
    research_run_id: str | None = None


class LessonSpec(WireModel):
    """A complete PDCA lesson: metadata, capability mapping, staged blocks."""
    id: str
    schema_version: Literal["1.0.0"] = "1.0.0"
    version: str

    title: str
    topic: str
    description: str
    difficulty: Literal["beginner", "intermediate", "advanced"]
    estimated_duration: int = Field(ge=1)  # minutes
    tags: list[str] = Field(default_factory=list)

    capability_ids: list[str] = Field(default_factory=list)
    cu_ids: list[str] = Field(default_factory=list)
    prerequisites: list[str] | None = None

    stages: LessonStages

    provenance: LessonProvenance | None = None
    citations: list[Citation] | None = None

    def iter_blocks(self):
        """Yield (stage, block) pairs in PDCA order, preserving block order."""
        for stage in Stage:
            for block in self.stages.for_stage(stage).blocks:
                yield stage, block

    def find_block(self, block_id: str):
        for _, block in self.iter_blocks():
            if block.id == block_id:
                return block
        return None
