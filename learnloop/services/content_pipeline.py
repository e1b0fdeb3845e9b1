"""Content Pipeline — authoring flow from a topic string to a stored (optionally published) version.

Invariants:
    - The terminal CompilerRun is always saved, completed or failed
    - A LessonVersion is saved only when the run completed
    - Publishing only repoints the lesson's pointer at the version just saved
"""

import logging

from learnloop.services.lesson_store import ContentVersioningStore
from learnloop.services.staged_compiler import CompileResult, StagedContentCompiler

logger = logging.getLogger(__name__)


async def compile_and_store(
    compiler: StagedContentCompiler,
    store: ContentVersioningStore,
    topic: str,
    publish: bool = False,
) -> CompileResult:
    result = await compiler.run_full(topic)
    if result.final_run is None:
        return result

    store.save_run(result.final_run)
    if not result.succeeded or result.lesson_version is None:
        logger.warning(
            "Compile produced no version for topic %r", topic,
            extra={"run_id": result.final_run.id},
        )
        return result

    result.lesson_version = store.save_version(result.lesson_version)
    if publish:
        result.lesson_version = store.publish_version(
            result.lesson_version.lesson_id, result.lesson_version.id,
        )
    return result
