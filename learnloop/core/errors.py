"""Error Hierarchy — typed, categorized exceptions raised at learnloop's boundaries.

Invariants:
    - Every error carries a stable code, an ErrorCategory and an ErrorSeverity
    - Boundary errors (validation, immutability, not-found, mismatch) leave stored
      state untouched and are safe for the caller to recover from
    - to_response() is JSON-safe; its context holds only the ids that were known
    - Projectors and command handlers never raise these; only stores and the
      compiler pipeline do

Design Decisions:
    - One LearnLoopError base so a single except clause covers every domain failure
    - ErrorContext is a plain dataclass of learnloop ids; logging reads it, never the reverse
    - debug_info stays in-process (exception type names and the like); it is not
      part of the to_response() envelope
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from learnloop.core.instants import to_iso, utc_now


class ErrorSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Coarse grouping callers branch on."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"
    EXTERNAL = "external"


@dataclass
class ErrorContext:
    """Which lesson, version, compiler run or phase the failure concerns."""
    lesson_id: str | None = None
    version_id: str | None = None
    run_id: str | None = None
    phase: str | None = None
    raised_at: datetime = field(default_factory=utc_now)
    debug_info: dict[str, Any] | None = None

    def ids(self) -> dict[str, str]:
        """The known ids, without the timestamp or debug_info."""
        return {
            k: v for k, v in asdict(self).items()
            if k not in ("raised_at", "debug_info") and v is not None
        }


class LearnLoopError(Exception):
    """Base exception for all learnloop errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Error envelope stored on failed compiler snapshots and returned to callers."""
        return {"error": {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "raisedAt": to_iso(self.context.raised_at),
            "context": self.context.ids(),
        }}


# ─── Boundary Errors ────────────────────────────────────────────

class ValidationError(LearnLoopError):
    """Malformed payload rejected at a store boundary."""
    def __init__(
        self,
        message: str,
        errors: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.errors = errors or []


class ImmutabilityError(LearnLoopError):
    """A version id was reused with different content."""
    def __init__(
        self,
        version_id: str,
        existing_hash: str,
        incoming_hash: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.version_id = version_id
        super().__init__(
            f"LessonVersion '{version_id}' already exists with a different specHash "
            f"(existing: {existing_hash}, incoming: {incoming_hash}). "
            "Version ids are immutable; use a new version id for updated content.",
            "IMMUTABILITY_VIOLATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )
        self.version_id = version_id
        self.existing_hash = existing_hash
        self.incoming_hash = incoming_hash


class ResourceNotFoundError(LearnLoopError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class VersionMismatchError(LearnLoopError):
    """Publish attempted with a version that belongs to another lesson."""
    def __init__(
        self,
        lesson_id: str,
        version_id: str,
        owner_lesson_id: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.lesson_id = lesson_id
        ctx.version_id = version_id
        super().__init__(
            f"Version '{version_id}' belongs to lesson '{owner_lesson_id}', "
            f"not '{lesson_id}'",
            "VERSION_MISMATCH", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx,
        )
        self.owner_lesson_id = owner_lesson_id


# ─── Pipeline / Infrastructure Errors ───────────────────────────

class PipelineStepError(LearnLoopError):
    """An external content-compiler call failed during a pipeline phase."""
    def __init__(
        self, phase: str, cause: BaseException, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.phase = phase
        ctx.debug_info = {**(ctx.debug_info or {}), "cause": type(cause).__name__}
        super().__init__(
            f"Pipeline phase '{phase}' failed: {cause}",
            "PIPELINE_STEP_FAILED", ErrorCategory.EXTERNAL,
            ErrorSeverity.ERROR, ctx,
        )
        self.phase = phase
        self.cause = cause


class StorageError(LearnLoopError):
    """Key-value persistence operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
