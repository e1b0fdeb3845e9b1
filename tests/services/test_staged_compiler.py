"""StagedContentCompiler tests — snapshot protocol, failure isolation, run_full.

Tests cover:
    - Full success: 10 snapshots, running before each phase, completed at the end
    - Artifacts accumulate monotonically
    - Failure at any phase: exactly one failed snapshot, no later collaborator calls
    - Snapshots are independent objects
    - on_run_saved receives the completed run once
    - run_full returns the packaged LessonVersion
"""

import pytest

from learnloop.core.domain_types import COMPILER_PHASES, CompilerPhase, RunStatus
from learnloop.infrastructure.mock_compiler import MockContentCompiler
from learnloop.services.staged_compiler import StagedContentCompiler
from tests.services.mock_compiler import ScriptedContentCompiler


async def _collect(compiler, topic="Python loops"):
    return [run async for run in compiler.compile(topic)]


# --- Success path -------------------------------------------------------------

async def test_success_yields_ten_snapshots(scripted_compiler):
    snapshots = await _collect(StagedContentCompiler(scripted_compiler))
    assert len(snapshots) == 10
    assert [s.phase for s in snapshots] == [p for p in COMPILER_PHASES for _ in (0, 1)]
    assert {s.phase for s in snapshots} == set(CompilerPhase)


async def test_running_snapshot_precedes_each_phase(scripted_compiler):
    snapshots = await _collect(StagedContentCompiler(scripted_compiler))
    assert [s.status for s in snapshots[0::2]] == [RunStatus.RUNNING] * 5


async def test_final_snapshot_completed_with_all_artifacts(scripted_compiler):
    final = (await _collect(StagedContentCompiler(scripted_compiler)))[-1]
    assert final.status == RunStatus.COMPLETED
    assert final.is_terminal
    assert final.artifacts.is_complete
    assert final.error is None


async def test_artifacts_accumulate_monotonically(scripted_compiler):
    snapshots = await _collect(StagedContentCompiler(scripted_compiler))
    slots = ("brief", "skeleton", "draft_lesson", "validation")
    for earlier, later in zip(snapshots, snapshots[1:]):
        for slot in slots:
            if getattr(earlier.artifacts, slot) is not None:
                assert getattr(later.artifacts, slot) == getattr(earlier.artifacts, slot)
    assert snapshots[1].artifacts.brief is not None
    assert snapshots[1].artifacts.skeleton is None


async def test_all_snapshots_share_run_identity(scripted_compiler):
    snapshots = await _collect(StagedContentCompiler(scripted_compiler))
    assert len({s.id for s in snapshots}) == 1
    assert {s.topic for s in snapshots} == {"Python loops"}


async def test_snapshots_are_independent(scripted_compiler):
    snapshots = await _collect(StagedContentCompiler(scripted_compiler))
    assert snapshots[0] is not snapshots[1]
    assert snapshots[0].artifacts.brief is None
    assert snapshots[0].status == RunStatus.RUNNING


async def test_provenance_recorded(scripted_compiler):
    compiler = StagedContentCompiler(
        scripted_compiler, model="test-model", prompt_bundle_version="v9",
    )
    final = (await _collect(compiler))[-1]
    assert final.provenance.model == "test-model"
    assert final.provenance.prompt_bundle_version == "v9"


async def test_collaborator_called_once_per_phase_in_order(scripted_compiler):
    await _collect(StagedContentCompiler(scripted_compiler))
    assert scripted_compiler.calls == [
        "generate_research_brief", "generate_skeleton", "author_blocks",
        "validate_lesson", "package_lesson_version",
    ]


# --- Failure path -------------------------------------------------------------

async def test_phase_two_failure_stops_pipeline():
    collaborator = ScriptedContentCompiler(fail_at=CompilerPhase.SKELETON)
    snapshots = await _collect(StagedContentCompiler(collaborator))

    failed = [s for s in snapshots if s.status == RunStatus.FAILED]
    assert len(failed) == 1
    assert snapshots[-1] is failed[0]
    assert snapshots[-1].phase == CompilerPhase.SKELETON
    assert collaborator.calls == ["generate_research_brief", "generate_skeleton"]


async def test_failed_snapshot_carries_error_envelope():
    collaborator = ScriptedContentCompiler(fail_at=CompilerPhase.SKELETON)
    final = (await _collect(StagedContentCompiler(collaborator)))[-1]
    assert final.error["error"]["code"] == "PIPELINE_STEP_FAILED"
    assert final.error["error"]["context"]["phase"] == "skeleton"
    assert "generate_skeleton unavailable" in final.error["error"]["message"]
    assert final.artifacts.brief is not None


@pytest.mark.parametrize("phase", list(CompilerPhase))
async def test_failure_at_any_phase_is_terminal(phase):
    collaborator = ScriptedContentCompiler(fail_at=phase)
    snapshots = await _collect(StagedContentCompiler(collaborator))
    index = COMPILER_PHASES.index(phase)
    # two snapshots per completed phase, then running + failed
    assert len(snapshots) == 2 * index + 2
    assert snapshots[-1].status == RunStatus.FAILED
    assert len(collaborator.calls) == index + 1


async def test_stopping_iteration_starts_no_further_phase(scripted_compiler):
    compiler = StagedContentCompiler(scripted_compiler)
    async for run in compiler.compile("Python loops"):
        if run.phase == CompilerPhase.BRIEF and run.status == RunStatus.RUNNING:
            break
    assert scripted_compiler.calls == []


# --- on_run_saved / run_full --------------------------------------------------

async def test_on_run_saved_receives_completed_run_once(scripted_compiler):
    saved = []
    compiler = StagedContentCompiler(scripted_compiler, on_run_saved=saved.append)
    await _collect(compiler)
    assert len(saved) == 1
    assert saved[0].status == RunStatus.COMPLETED


async def test_on_run_saved_not_called_on_failure():
    saved = []
    collaborator = ScriptedContentCompiler(fail_at=CompilerPhase.BLOCKS)
    await _collect(StagedContentCompiler(collaborator, on_run_saved=saved.append))
    assert saved == []


async def test_run_full_returns_version():
    result = await StagedContentCompiler(MockContentCompiler()).run_full("Python loops")
    assert result.succeeded
    assert len(result.snapshots) == 10
    assert result.final_run is result.snapshots[-1]
    assert result.lesson_version.id == f"ver-{result.final_run.id}"
    assert result.lesson_version.lesson_id == "lesson-python-loops"
    assert result.lesson_version.compiler_run_id == result.final_run.id


async def test_run_full_failure_has_no_version():
    collaborator = ScriptedContentCompiler(fail_at=CompilerPhase.PACKAGE)
    result = await StagedContentCompiler(collaborator).run_full("Python loops")
    assert not result.succeeded
    assert result.lesson_version is None
    assert result.final_run.status == RunStatus.FAILED
