"""Scripted Content Compiler — ContentCompiler test double with failure injection.

Invariants:
    - Records every collaborator call in `calls` (method name, in order)
    - fail_at=<phase> makes that phase's method raise; earlier phases succeed
    - Artifacts come from the deterministic MockContentCompiler

Design Decisions:
    - Wraps MockContentCompiler instead of re-building artifacts: the double only
      adds observation and failure, never different content
"""

from learnloop.core.domain_types import CompilerPhase
from learnloop.infrastructure.mock_compiler import MockContentCompiler

_PHASE_METHODS = {
    CompilerPhase.BRIEF: "generate_research_brief",
    CompilerPhase.SKELETON: "generate_skeleton",
    CompilerPhase.BLOCKS: "author_blocks",
    CompilerPhase.VALIDATE: "validate_lesson",
    CompilerPhase.PACKAGE: "package_lesson_version",
}


class CollaboratorDown(RuntimeError):
    pass


class ScriptedContentCompiler:
    def __init__(self, fail_at: CompilerPhase | None = None):
        self.fail_at = fail_at
        self.calls: list[str] = []
        self._inner = MockContentCompiler()

    async def _invoke(self, phase: CompilerPhase, *args):
        method = _PHASE_METHODS[phase]
        self.calls.append(method)
        if self.fail_at == phase:
            raise CollaboratorDown(f"{method} unavailable")
        return await getattr(self._inner, method)(*args)

    async def generate_research_brief(self, topic):
        return await self._invoke(CompilerPhase.BRIEF, topic)

    async def generate_skeleton(self, brief):
        return await self._invoke(CompilerPhase.SKELETON, brief)

    async def author_blocks(self, skeleton, brief):
        return await self._invoke(CompilerPhase.BLOCKS, skeleton, brief)

    async def validate_lesson(self, lesson):
        return await self._invoke(CompilerPhase.VALIDATE, lesson)

    async def package_lesson_version(self, lesson, run_id):
        return await self._invoke(CompilerPhase.PACKAGE, lesson, run_id)
