"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions never await — the shell orchestrates IO around them
"""

from typing import Any, Protocol

from learnloop.schemas.compiler import (
    LessonSkeleton, LessonVersion, ResearchBrief, ValidationReport,
)
from learnloop.schemas.lesson import LessonSpec


class KeyValueStore(Protocol):
    """Durable key-value persistence with read-your-writes within one process.

    Values are JSON-compatible Python objects (dicts, lists, scalars).
    """
    async def get(self, key: str) -> Any | None: ...
    async def set(self, key: str, value: Any) -> None: ...
    async def remove(self, key: str) -> None: ...


class ContentCompiler(Protocol):
    """External content generator driven phase-by-phase by StagedContentCompiler."""
    async def generate_research_brief(self, topic: str) -> ResearchBrief: ...
    async def generate_skeleton(self, brief: ResearchBrief) -> LessonSkeleton: ...
    async def author_blocks(
        self, skeleton: LessonSkeleton, brief: ResearchBrief,
    ) -> LessonSpec: ...
    async def validate_lesson(self, lesson: LessonSpec) -> ValidationReport: ...
    async def package_lesson_version(
        self, lesson: LessonSpec, run_id: str,
    ) -> LessonVersion: ...
