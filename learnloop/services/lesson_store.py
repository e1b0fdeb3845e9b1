"""Content Versioning Store — immutable, hash-stamped lesson versions plus a published pointer.

Invariants:
    - save_version stamps specHash = compute_spec_hash(spec); incoming hashes are ignored
    - A version id, once saved, may only be re-saved with an identical specHash;
      differing content raises ImmutabilityError and leaves the stored record untouched
    - Same hash (metadata-only change such as publishedAt) → idempotent overwrite
    - Stored versions share no objects with callers: saves keep a deep copy and
      every read hands out a fresh one, so specHash always matches the stored spec
    - The lessonId → versionId published map is freely repointable; repointing never
      creates a version or changes any version's content
    - Compiler runs are upserted by id; get_run on an unknown id raises ResourceNotFoundError

Design Decisions:
    - Explicit open/flush boundary (see open_lesson_store): mutations are synchronous
      and in-memory, flush() persists runs/versions/pointers when dirty
    - Versions kept in insertion order in a dict keyed by id; persisted as a list
"""

import logging
from collections.abc import Iterable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from learnloop.core.domain_types import (
    LessonId, RunId, SourceProvider, VersionId, SEED_REFRESH_POLICY_DAYS,
)
from learnloop.core.errors import (
    ErrorContext, ImmutabilityError, ResourceNotFoundError,
    ValidationError, VersionMismatchError,
)
from learnloop.core.instants import add_days, parse_instant, to_iso, utc_now
from learnloop.core.repository_protocols import KeyValueStore
from learnloop.core.spec_hash import compute_spec_hash
from learnloop.schemas.compiler import CompilerRun, LessonVersion
from learnloop.schemas.lesson import LessonSpec

logger = logging.getLogger(__name__)

RUNS_KEY = "learnloop_compiler_runs"
VERSIONS_KEY = "learnloop_lesson_versions"
PUBLISHED_KEY = "learnloop_published_pointers"

SEED_RUN_ID = "seed-run"

_RUNS = TypeAdapter(list[CompilerRun])
_VERSIONS = TypeAdapter(list[LessonVersion])
_POINTERS = TypeAdapter(dict[str, str])


def _validate(model: type, data, what: str):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Malformed {what}", errors=e.errors()) from e


def _detached(version: LessonVersion) -> LessonVersion:
    return version.model_copy(deep=True)


def stamp_version(version: LessonVersion) -> LessonVersion:
    """Derive specHash, generatedAt (defaults to createdAt) and staleAfter (createdAt + policy).

    Returns a deep copy: the result shares no objects with `version`.
    """
    return version.model_copy(deep=True, update={
        "spec_hash": compute_spec_hash(version.spec),
        "generated_at": version.generated_at or version.created_at,
        "stale_after": (
            version.stale_after
            or add_days(version.created_at, version.refresh_policy_days)
        ),
    })


class ContentVersioningStore:
    """Owns every LessonVersion, the published pointer map and compiler run records."""

    def __init__(
        self,
        kv: KeyValueStore,
        runs_key: str = RUNS_KEY,
        versions_key: str = VERSIONS_KEY,
        published_key: str = PUBLISHED_KEY,
        seed_refresh_policy_days: int = SEED_REFRESH_POLICY_DAYS,
    ):
        self._kv = kv
        self._runs_key = runs_key
        self._versions_key = versions_key
        self._published_key = published_key
        self.seed_refresh_policy_days = seed_refresh_policy_days
        self._runs: dict[str, CompilerRun] = {}
        self._versions: dict[str, LessonVersion] = {}
        self._published: dict[str, str] = {}
        self._dirty = False

    @property
    def dirty(self) -> bool:
        return self._dirty

    # --- Runs ---------------------------------------------------------------

    def save_run(self, run: CompilerRun | dict) -> CompilerRun:
        valid = _validate(CompilerRun, run, "CompilerRun")
        self._runs[valid.id] = valid
        self._dirty = True
        logger.info(
            "Saved compiler run (%s)", valid.status.value,
            extra={"run_id": valid.id},
        )
        return valid

    def get_run(self, run_id: RunId) -> CompilerRun:
        run = self._runs.get(run_id)
        if run is None:
            raise ResourceNotFoundError(
                "CompilerRun", run_id, ErrorContext(run_id=run_id),
            )
        return run

    def get_runs(self) -> list[CompilerRun]:
        """All runs, newest first by timestamp."""
        return sorted(
            self._runs.values(),
            key=lambda r: parse_instant(r.timestamp),
            reverse=True,
        )

    # --- Versions -----------------------------------------------------------

    def save_version(self, version: LessonVersion | dict) -> LessonVersion:
        """Insert or idempotently overwrite a version; reject changed content under a reused id."""
        stamped = stamp_version(_validate(LessonVersion, version, "LessonVersion"))

        existing = self._versions.get(stamped.id)
        if (
            existing is not None
            and existing.spec_hash
            and existing.spec_hash != stamped.spec_hash
        ):
            logger.warning(
                "Rejected content change under existing version id",
                extra={"version_id": stamped.id, "lesson_id": stamped.lesson_id},
            )
            raise ImmutabilityError(
                stamped.id, existing.spec_hash, stamped.spec_hash,
                ErrorContext(lesson_id=stamped.lesson_id),
            )

        self._versions[stamped.id] = stamped
        self._dirty = True
        logger.info(
            "Saved lesson version",
            extra={"version_id": stamped.id, "lesson_id": stamped.lesson_id},
        )
        return _detached(stamped)

    def get_version(self, version_id: VersionId) -> LessonVersion | None:
        version = self._versions.get(version_id)
        return _detached(version) if version is not None else None

    def get_version_history(self, lesson_id: LessonId) -> list[LessonVersion]:
        """All versions of a lesson, newest first by createdAt."""
        return sorted(
            (_detached(v) for v in self._versions.values() if v.lesson_id == lesson_id),
            key=lambda v: parse_instant(v.created_at),
            reverse=True,
        )

    def publish_version(
        self, lesson_id: LessonId, version_id: VersionId, now: datetime | None = None,
    ) -> LessonVersion:
        """Repoint lesson_id's published pointer at an existing version of that lesson."""
        version = self._versions.get(version_id)
        if version is None:
            raise ResourceNotFoundError(
                "LessonVersion", version_id,
                ErrorContext(lesson_id=lesson_id, version_id=version_id),
            )
        if version.lesson_id != lesson_id:
            raise VersionMismatchError(lesson_id, version_id, version.lesson_id)

        published = self.save_version(
            version.model_copy(update={"published_at": to_iso(now or utc_now())}),
        )
        self._published[lesson_id] = version_id
        self._dirty = True
        logger.info(
            "Published lesson version",
            extra={"version_id": version_id, "lesson_id": lesson_id},
        )
        return published

    def get_published_version(self, lesson_id: LessonId) -> LessonVersion | None:
        version_id = self._published.get(lesson_id)
        if version_id is None:
            return None
        return self.get_version(version_id)

    def get_all_published_lessons(self) -> list[LessonVersion]:
        """Published versions in pointer insertion order; dangling pointers are skipped."""
        return [
            _detached(self._versions[vid]) for vid in self._published.values()
            if vid in self._versions
        ]

    def seed(
        self,
        lessons: Iterable[LessonSpec | dict],
        now: datetime | None = None,
        refresh_policy_days: int | None = None,
    ) -> int:
        """Install baseline content as published manual_seed versions.

        Lessons that already have a published version are skipped, so calling
        seed() on every start-up is safe. Returns the number of lessons seeded.
        """
        if refresh_policy_days is None:
            refresh_policy_days = self.seed_refresh_policy_days
        created_at = to_iso(now or utc_now())
        seeded = 0
        for raw in lessons:
            lesson = _validate(LessonSpec, raw, "LessonSpec")
            if lesson.id in self._published:
                continue
            version_id = f"ver-seed-{lesson.id}"
            self.save_version(LessonVersion(
                id=version_id,
                lesson_id=lesson.id,
                spec=lesson,
                compiler_run_id=SEED_RUN_ID,
                created_at=created_at,
                source_provider=SourceProvider.MANUAL_SEED,
                refresh_policy_days=refresh_policy_days,
                stale_after=add_days(created_at, refresh_policy_days),
            ))
            self.publish_version(lesson.id, version_id, now=parse_instant(created_at))
            seeded += 1

        if seeded:
            logger.info("Seeded %d lessons", seeded)
        return seeded

    # --- Persistence --------------------------------------------------------

    async def hydrate(self) -> None:
        """Replace in-memory state with the persisted runs, versions and pointers."""
        raw_runs = await self._kv.get(self._runs_key)
        raw_versions = await self._kv.get(self._versions_key)
        raw_published = await self._kv.get(self._published_key)
        try:
            runs = _RUNS.validate_python(raw_runs or [])
            versions = _VERSIONS.validate_python(raw_versions or [])
            published = _POINTERS.validate_python(raw_published or {})
        except PydanticValidationError as e:
            raise ValidationError(
                "Persisted lesson store is malformed", errors=e.errors(),
            ) from e

        self._runs = {r.id: r for r in runs}
        self._versions = {v.id: v for v in versions}
        self._published = published
        self._dirty = False
        logger.info(
            "Hydrated lesson store: %d versions, %d published, %d runs",
            len(self._versions), len(self._published), len(self._runs),
        )

    async def flush(self) -> None:
        if not self._dirty:
            return
        await self._kv.set(self._runs_key, [r.to_wire() for r in self._runs.values()])
        await self._kv.set(
            self._versions_key, [v.to_wire() for v in self._versions.values()],
        )
        await self._kv.set(self._published_key, dict(self._published))
        self._dirty = False


@asynccontextmanager
async def open_lesson_store(
    kv: KeyValueStore,
    runs_key: str = RUNS_KEY,
    versions_key: str = VERSIONS_KEY,
    published_key: str = PUBLISHED_KEY,
    seed_refresh_policy_days: int = SEED_REFRESH_POLICY_DAYS,
) -> AsyncIterator[ContentVersioningStore]:
    """Hydrated store whose mutations are flushed on every exit path."""
    store = ContentVersioningStore(
        kv, runs_key, versions_key, published_key, seed_refresh_policy_days,
    )
    await store.hydrate()
    try:
        yield store
    finally:
        await store.flush()
