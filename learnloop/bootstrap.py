"""Bootstrap — explicit per-process construction of the shared stores and pipeline.

Invariants:
    - One container per process in production; tests open a fresh one per test
    - Stores are hydrated on enter and flushed on every exit path (including errors)
    - The database engine is disposed on exit when the container created it

Design Decisions:
    - A container passed by handle replaces module-level singleton stores
      (dependency injection; callers never import a global store)
    - Passing `kv` skips the database entirely (in-memory or caller-owned store)
"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from learnloop.config import Settings, get_settings
from learnloop.core.repository_protocols import ContentCompiler, KeyValueStore
from learnloop.infrastructure.database import DatabaseSessionManager, SqlKeyValueStore
from learnloop.infrastructure.observability import setup_logging
from learnloop.services.event_log import EventLog, open_event_log
from learnloop.services.lesson_store import ContentVersioningStore, open_lesson_store
from learnloop.services.staged_compiler import StagedContentCompiler

logger = logging.getLogger(__name__)


@dataclass
class LearnLoopContainer:
    settings: Settings
    kv: KeyValueStore
    event_log: EventLog
    lesson_store: ContentVersioningStore
    compiler: StagedContentCompiler | None = None

    async def flush(self) -> None:
        await self.event_log.flush()
        await self.lesson_store.flush()


@asynccontextmanager
async def open_container(
    settings: Settings | None = None,
    kv: KeyValueStore | None = None,
    content_compiler: ContentCompiler | None = None,
    configure_logging: bool = True,
) -> AsyncIterator[LearnLoopContainer]:
    """Startup/shutdown lifecycle for the learnloop core."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)

    async with AsyncExitStack() as stack:
        if kv is None:
            manager = DatabaseSessionManager(
                settings.database_url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
            )
            stack.push_async_callback(manager.dispose)
            await manager.create_all()
            kv = SqlKeyValueStore(manager)

        event_log = await stack.enter_async_context(
            open_event_log(kv, settings.event_log_key),
        )
        lesson_store = await stack.enter_async_context(open_lesson_store(
            kv, settings.runs_key, settings.versions_key, settings.published_key,
            settings.seed_refresh_policy_days,
        ))

        compiler = None
        if content_compiler is not None:
            compiler = StagedContentCompiler(
                content_compiler,
                model=settings.compiler_model,
                prompt_bundle_version=settings.prompt_bundle_version,
                on_run_saved=lesson_store.save_run,
            )

        logger.info("learnloop container opened")
        yield LearnLoopContainer(
            settings=settings,
            kv=kv,
            event_log=event_log,
            lesson_store=lesson_store,
            compiler=compiler,
        )
        logger.info("learnloop container closing")
