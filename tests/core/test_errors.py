"""Error envelope tests.

Tests cover:
    - to_response carries code, category, severity and a ms-precision raisedAt
    - Context lists only the ids that were supplied
    - Subclasses fill in their own ids; debug_info stays out of the envelope
"""

from datetime import datetime, timezone

from learnloop.core.errors import (
    ErrorContext, ImmutabilityError, LearnLoopError, PipelineStepError,
    ResourceNotFoundError, StorageError, VersionMismatchError,
)


def test_envelope_fields():
    ctx = ErrorContext(lesson_id="l1", raised_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    body = ResourceNotFoundError("LessonBlock", "b9", ctx).to_response()["error"]
    assert body == {
        "code": "RESOURCE_NOT_FOUND",
        "category": "resource_not_found",
        "severity": "error",
        "message": "LessonBlock 'b9' not found",
        "raisedAt": "2026-01-01T00:00:00.000Z",
        "context": {"lesson_id": "l1"},
    }


def test_empty_context_has_no_ids():
    assert StorageError("locked", "connect").to_response()["error"]["context"] == {}


def test_subclasses_stamp_their_ids():
    assert ImmutabilityError("v1", "a", "b").context.ids() == {"version_id": "v1"}
    assert VersionMismatchError("l1", "v1", "l2").context.ids() == {
        "lesson_id": "l1", "version_id": "v1",
    }
    err = PipelineStepError("brief", RuntimeError("down"), ErrorContext(run_id="r1"))
    assert err.context.ids() == {"run_id": "r1", "phase": "brief"}
    assert err.context.debug_info == {"cause": "RuntimeError"}
    assert "debugInfo" not in err.to_response()["error"]
    assert "debug_info" not in err.to_response()["error"]["context"]


def test_all_errors_share_the_base():
    assert isinstance(StorageError("x", "write"), LearnLoopError)
    assert StorageError("x", "write").severity.value == "critical"
