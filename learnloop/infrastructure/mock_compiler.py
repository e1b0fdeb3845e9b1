"""Mock Content Compiler — deterministic ContentCompiler for demos and local development.

Invariants:
    - Same topic → same brief, skeleton, lesson and report (no randomness)
    - Only package_lesson_version reads the clock (createdAt stamping)
    - Every returned artifact validates against its schema
"""

import asyncio
import re

from learnloop.core.domain_types import SourceProvider, Stage, DEFAULT_REFRESH_POLICY_DAYS
from learnloop.core.instants import to_iso, utc_now
from learnloop.schemas.compiler import (
    BlockOutlineItem, BriefSource, LessonSkeleton, LessonVersion,
    PDCAStructure, ResearchBrief, ValidationReport,
)
from learnloop.schemas.lesson import (
    ExerciseBlock, ExplainerBlock, LessonBlock, LessonProvenance, LessonSpec,
    LessonStages, PredictionBlock, ReflectionBlock, StageContent, TodoBlock,
)


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "untitled"


class MockContentCompiler:
    def __init__(
        self,
        delay_seconds: float = 0.0,
        model: str = "mock-llm-v1",
        prompt_bundle_version: str = "v1.0.0",
    ):
        self.delay_seconds = delay_seconds
        self.model = model
        self.prompt_bundle_version = prompt_bundle_version

    async def _pause(self) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

    async def generate_research_brief(self, topic: str) -> ResearchBrief:
        await self._pause()
        return ResearchBrief(
            topic=topic,
            objectives=[
                "Understand core concepts", "Apply to problem", "Verify understanding",
            ],
            misconceptions=["Common error 1", "Common error 2"],
            key_terms=["Term A", "Term B"],
            sources=[
                BriefSource(id="src-1", title="Official Documentation", url="https://example.com"),
                BriefSource(id="src-2", title="Community Guide", snippet="Key insight here..."),
            ],
        )

    async def generate_skeleton(self, brief: ResearchBrief) -> LessonSkeleton:
        await self._pause()
        return LessonSkeleton(
            pdca_structure=PDCAStructure(
                plan="Explain concept and predict outcome",
                do="Execute task with constraints",
                check="Verify results against prediction",
                act="Reflect and plan next steps",
            ),
            block_outline=[
                BlockOutlineItem(stage=Stage.PLAN, type="explainer", goal="Intro"),
                BlockOutlineItem(stage=Stage.PLAN, type="prediction", goal="Predict"),
                BlockOutlineItem(stage=Stage.DO, type="exercise", goal="Practice"),
                BlockOutlineItem(stage=Stage.CHECK, type="reflection", goal="Compare"),
                BlockOutlineItem(stage=Stage.ACT, type="todo", goal="Next step"),
            ],
        )

    def _block(self, index: int, item: BlockOutlineItem, brief: ResearchBrief) -> LessonBlock:
        block_id = f"b-{item.stage.value}-{index}"
        targets = brief.misconceptions[:1] or None
        match item.type:
            case "prediction":
                return PredictionBlock(
                    id=block_id, prompt=f"What do you expect: {item.goal}?",
                )
            case "exercise":
                return ExerciseBlock(
                    id=block_id,
                    prompt=f"{item.goal}: apply {brief.topic}.",
                    hints=["Re-read the key terms.", "Start from the smallest case."],
                    remediation_targets=targets,
                )
            case "reflection":
                return ReflectionBlock(id=block_id, prompt=f"{item.goal} with your prediction.")
            case "todo":
                return TodoBlock(id=block_id, text=item.goal)
            case _:
                return ExplainerBlock(
                    id=block_id, markdown=f"## {item.goal}\n\n{brief.topic} [src-1]",
                )

    async def author_blocks(
        self, skeleton: LessonSkeleton, brief: ResearchBrief,
    ) -> LessonSpec:
        await self._pause()
        stages: dict[str, list[LessonBlock]] = {s.value: [] for s in Stage}
        for index, item in enumerate(skeleton.block_outline):
            stages[item.stage.value].append(self._block(index, item, brief))

        return LessonSpec(
            id=f"lesson-{slugify(brief.topic)}",
            version="v1.0.0",
            title=f"Mastering {brief.topic}",
            topic=brief.topic,
            description=f"Generated lesson for {brief.topic}",
            difficulty="beginner",
            estimated_duration=15,
            tags=[slugify(brief.topic)],
            stages=LessonStages(**{
                name: StageContent(blocks=blocks) for name, blocks in stages.items()
            }),
            provenance=LessonProvenance(
                generator_model=self.model,
                prompt_bundle_version=self.prompt_bundle_version,
            ),
        )

    async def validate_lesson(self, lesson: LessonSpec) -> ValidationReport:
        await self._pause()
        empty = [s.value for s in Stage if not lesson.stages.for_stage(s).blocks]
        return ValidationReport(
            is_valid=not empty,
            errors=[f"Stage '{name}' has no blocks" for name in empty],
            warnings=[] if lesson.citations else ["Lesson has no citations"],
            citation_coverage=1.0 if lesson.citations else 0.0,
        )

    async def package_lesson_version(self, lesson: LessonSpec, run_id: str) -> LessonVersion:
        await self._pause()
        return LessonVersion(
            id=f"ver-{run_id}",
            lesson_id=lesson.id,
            spec=lesson,
            compiler_run_id=run_id,
            created_at=to_iso(utc_now()),
            source_provider=SourceProvider.MOCK_LLM,
            refresh_policy_days=DEFAULT_REFRESH_POLICY_DAYS,
        )
