"""Tutor context tests — scoped block view for a tutoring collaborator.

Tests cover:
    - Hint ladder and rubric come from the block
    - Hints revealed and last attempt are scoped to (lesson, block)
    - Citations narrowed to those referenced by the block text
    - Unknown block raises ResourceNotFoundError
"""

import pytest

from learnloop.core.errors import ResourceNotFoundError
from learnloop.core.tutor_context import build_tutor_context
from tests.factories import attempt_submitted, hint_revealed, make_lesson


def test_exercise_block_context():
    events = [
        hint_revealed("lesson-1", "b-exercise", 0),
        hint_revealed("lesson-1", "b-exercise", 1),
        hint_revealed("lesson-1", "b-other", 0),
        hint_revealed("lesson-2", "b-exercise", 0),
    ]
    ctx = build_tutor_context(make_lesson(), "b-exercise", events)
    assert ctx.block_content.id == "b-exercise"
    assert ctx.hint_ladder == ["Start with total = 0", "Add each item", "Return total"]
    assert ctx.rubric == ["off-by-one"]
    assert ctx.hints_revealed == 2


def test_last_attempt_for_block_wins():
    events = [
        attempt_submitted(inputs={"code": "v1"}, timestamp="2026-01-01T00:00:00.000Z"),
        attempt_submitted(inputs={"code": "v2"}, timestamp="2026-01-02T00:00:00.000Z"),
        attempt_submitted(block_id="b-todo", inputs={"code": "other"}),
    ]
    ctx = build_tutor_context(make_lesson(), "b-exercise", events)
    assert ctx.learner_attempt == {"code": "v2"}


def test_no_attempt_gives_none():
    ctx = build_tutor_context(make_lesson(), "b-exercise", [])
    assert ctx.learner_attempt is None
    assert ctx.hints_revealed == 0


def test_citations_scoped_to_referencing_block():
    ctx = build_tutor_context(make_lesson(), "b-explain", [])
    assert [c.id for c in ctx.citations] == ["cit-1"]


def test_unreferenced_block_gets_all_citations():
    ctx = build_tutor_context(make_lesson(), "b-todo", [])
    assert [c.id for c in ctx.citations] == ["cit-1", "cit-2"]
    assert ctx.hint_ladder == []


def test_unknown_block_raises():
    with pytest.raises(ResourceNotFoundError) as exc:
        build_tutor_context(make_lesson(), "missing", [])
    assert exc.value.code == "RESOURCE_NOT_FOUND"
