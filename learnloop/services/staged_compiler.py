"""Staged Content Compiler — async generator driving a ContentCompiler through 5 phases.

Invariants:
    - Phases run strictly in order: brief → skeleton → blocks → validate → package
    - Per phase: one `running` snapshot BEFORE the collaborator call, then one snapshot
      with the new artifact merged in (phase 5: the final `completed` snapshot)
    - Artifacts accumulate monotonically; a slot is never cleared
    - On the first collaborator failure exactly one `failed` snapshot is yielded and the
      generator ends; no later phase's collaborator method is invoked
    - Failures become data (PipelineStepError.to_response() on the snapshot), never raised
    - Every snapshot is a validated, independent CompilerRun

Design Decisions:
    - Exactly one suspension per phase (the collaborator await); no cancellation token.
      A caller may stop iterating after any snapshot; no further phase starts.
    - on_run_saved receives the completed run once; run_full() also returns the
      packaged LessonVersion so the caller can hand it to the versioning store
"""

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from uuid import uuid4

from learnloop.core.domain_types import CompilerPhase, RunStatus
from learnloop.core.errors import ErrorContext, PipelineStepError
from learnloop.core.instants import to_iso, utc_now
from learnloop.core.repository_protocols import ContentCompiler
from learnloop.schemas.compiler import CompilerRun, LessonVersion, RunProvenance

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "mock-llm-v1"
DEFAULT_PROMPT_BUNDLE_VERSION = "v1.0.0"

_ARTIFACT_SLOTS = {
    CompilerPhase.BRIEF: "brief",
    CompilerPhase.SKELETON: "skeleton",
    CompilerPhase.BLOCKS: "draft_lesson",
    CompilerPhase.VALIDATE: "validation",
}


def snapshot(run: CompilerRun, **changes) -> CompilerRun:
    """A validated copy of `run` with `changes` applied."""
    data = run.model_dump()
    data.update(changes)
    return CompilerRun.model_validate(data)


def merge_artifact(run: CompilerRun, slot: str, value) -> CompilerRun:
    artifacts = run.artifacts.model_dump()
    artifacts[slot] = value
    return snapshot(run, artifacts=artifacts)


@dataclass
class CompileResult:
    snapshots: list[CompilerRun] = field(default_factory=list)
    final_run: CompilerRun | None = None
    lesson_version: LessonVersion | None = None

    @property
    def succeeded(self) -> bool:
        return self.final_run is not None and self.final_run.status == RunStatus.COMPLETED


class StagedContentCompiler:
    """Orchestrates and snapshots; never computes content itself."""

    def __init__(
        self,
        compiler: ContentCompiler,
        model: str = DEFAULT_MODEL,
        prompt_bundle_version: str = DEFAULT_PROMPT_BUNDLE_VERSION,
        on_run_saved: Callable[[CompilerRun], object] | None = None,
    ):
        self.compiler = compiler
        self.model = model
        self.prompt_bundle_version = prompt_bundle_version
        self.on_run_saved = on_run_saved

    def _new_run(self, topic: str) -> CompilerRun:
        return CompilerRun(
            id=f"run-{uuid4().hex}",
            timestamp=to_iso(utc_now()),
            topic=topic,
            status=RunStatus.PENDING,
            provenance=RunProvenance(
                model=self.model, prompt_bundle_version=self.prompt_bundle_version,
            ),
        )

    def _failed(self, run: CompilerRun, phase: CompilerPhase, exc: Exception) -> CompilerRun:
        error = PipelineStepError(
            phase.value, exc, ErrorContext(run_id=run.id, phase=phase.value),
        )
        logger.error(
            "Compiler phase failed: %s", exc,
            extra={"run_id": run.id, "phase": phase.value, "error_code": error.code},
            exc_info=exc,
        )
        return snapshot(run, status=RunStatus.FAILED, error=error.to_response())

    async def _call(self, phase: CompilerPhase, run: CompilerRun):
        """The single suspension point of a phase."""
        artifacts = run.artifacts
        match phase:
            case CompilerPhase.BRIEF:
                return await self.compiler.generate_research_brief(run.topic)
            case CompilerPhase.SKELETON:
                return await self.compiler.generate_skeleton(artifacts.brief)
            case CompilerPhase.BLOCKS:
                return await self.compiler.author_blocks(artifacts.skeleton, artifacts.brief)
            case CompilerPhase.VALIDATE:
                return await self.compiler.validate_lesson(artifacts.draft_lesson)
            case CompilerPhase.PACKAGE:
                return await self.compiler.package_lesson_version(
                    artifacts.draft_lesson, run.id,
                )

    async def _run_phases(
        self, topic: str, sink: CompileResult,
    ) -> AsyncIterator[CompilerRun]:
        run = self._new_run(topic)

        for phase in CompilerPhase:
            run = snapshot(run, phase=phase, status=RunStatus.RUNNING)
            logger.info(
                "Compiler phase started", extra={"run_id": run.id, "phase": phase.value},
            )
            yield run

            try:
                result = await self._call(phase, run)
                if phase == CompilerPhase.PACKAGE:
                    sink.lesson_version = LessonVersion.model_validate(result)
                    run = snapshot(run, status=RunStatus.COMPLETED)
                else:
                    run = merge_artifact(run, _ARTIFACT_SLOTS[phase], result)
            except Exception as e:
                sink.lesson_version = None
                yield self._failed(run, phase, e)
                return

            if run.status == RunStatus.COMPLETED and self.on_run_saved is not None:
                self.on_run_saved(run)
            yield run

    async def compile(self, topic: str) -> AsyncIterator[CompilerRun]:
        """Yield a CompilerRun snapshot before and after every phase."""
        async for run in self._run_phases(topic, CompileResult()):
            yield run

    async def run_full(self, topic: str) -> CompileResult:
        """Drain every snapshot; return them with the terminal run and packaged version."""
        result = CompileResult()
        async for run in self._run_phases(topic, result):
            result.snapshots.append(run)
        result.final_run = result.snapshots[-1] if result.snapshots else None
        return result
