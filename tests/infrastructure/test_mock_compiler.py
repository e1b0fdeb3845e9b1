"""MockContentCompiler tests — deterministic artifacts for every phase.

Tests cover:
    - Same topic → same brief, skeleton and lesson
    - Authored lesson places outline blocks into their PDCA stages
    - Validation flags empty stages
    - Packaging derives ids from the run id
"""

from learnloop.core.domain_types import SourceProvider, Stage
from learnloop.infrastructure.mock_compiler import MockContentCompiler, slugify
from learnloop.schemas.lesson import LessonStages, StageContent


async def _lesson(compiler, topic="Python loops"):
    brief = await compiler.generate_research_brief(topic)
    skeleton = await compiler.generate_skeleton(brief)
    return await compiler.author_blocks(skeleton, brief)


async def test_artifacts_are_deterministic():
    compiler = MockContentCompiler()
    assert await _lesson(compiler) == await _lesson(compiler)


async def test_lesson_has_blocks_in_every_stage():
    lesson = await _lesson(MockContentCompiler())
    assert lesson.id == "lesson-python-loops"
    for stage in Stage:
        assert lesson.stages.for_stage(stage).blocks
    assert lesson.stages.do.blocks[0].type == "exercise"
    assert lesson.stages.do.blocks[0].hints


async def test_validation_passes_for_authored_lesson():
    compiler = MockContentCompiler()
    report = await compiler.validate_lesson(await _lesson(compiler))
    assert report.is_valid
    assert report.errors == []


async def test_validation_flags_empty_stage():
    compiler = MockContentCompiler()
    lesson = await _lesson(compiler)
    hollow = lesson.model_copy(update={"stages": LessonStages(
        plan=lesson.stages.plan, do=lesson.stages.do,
        check=lesson.stages.check, act=StageContent(),
    )})
    report = await compiler.validate_lesson(hollow)
    assert not report.is_valid
    assert report.errors == ["Stage 'act' has no blocks"]


async def test_package_uses_run_id():
    compiler = MockContentCompiler()
    version = await compiler.package_lesson_version(await _lesson(compiler), "run-42")
    assert version.id == "ver-run-42"
    assert version.compiler_run_id == "run-42"
    assert version.source_provider == SourceProvider.MOCK_LLM
    assert version.refresh_policy_days == 90


def test_slugify():
    assert slugify("  React Hooks & State! ") == "react-hooks-state"
    assert slugify("!!!") == "untitled"
