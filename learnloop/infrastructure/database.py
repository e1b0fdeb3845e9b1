"""Database Session Manager — async engine, auto-rollback sessions, SQL-backed key-value store.

Invariants:
    - A failing session is rolled back before the error leaves session()
    - SQLAlchemy failures surface as StorageError, operation picked from _FAILURE_KINDS
    - SqlKeyValueStore gives read-your-writes: every set/remove commits before returning

Design Decisions:
    - One DatabaseSessionManager per container (created by bootstrap.open_container),
      no module-level singleton
    - Pool sizing only applies to server databases; SQLite uses SQLAlchemy's default pool
    - expire_on_commit=False so KeyValueEntry values stay readable after commit
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import select, text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from learnloop.core.errors import StorageError
from learnloop.db.base import Base
from learnloop.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError subclass DBAPIError.
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "write", "kv_entries constraint violated"),
    (OperationalError, "connect", "database unavailable or locked"),
    (DBAPIError, "driver", "driver rejected the statement"),
    (SQLAlchemyError, "session", "unexpected SQLAlchemy failure"),
)


def _storage_error(exc: SQLAlchemyError) -> StorageError:
    for kind, operation, message in _FAILURE_KINDS:
        if isinstance(exc, kind):
            break
    logger.error(
        "%s during %s: %s", type(exc).__name__, operation, exc,
        extra={"error_code": "STORAGE_ERROR"},
    )
    return StorageError(message, operation)


class DatabaseSessionManager:
    """Owns the async engine for one container and hands out kv_entries sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 5, max_overflow: int = 10,
    ):
        engine_kwargs: dict[str, Any] = {}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that rolls back and re-raises as StorageError on any SQLAlchemy failure."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _storage_error(e) from e
        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create missing tables (kv_entries)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except StorageError:
            logger.warning("Storage health check failed", extra={"error_code": "STORAGE_ERROR"})
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


class SqlKeyValueStore:
    """KeyValueStore over the kv_entries table."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def get(self, key: str) -> Any | None:
        async with self._manager.session() as db:
            result = await db.execute(
                select(KeyValueEntry.value).where(KeyValueEntry.key == key),
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        async with self._manager.session() as db:
            entry = await db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            await db.commit()

    async def remove(self, key: str) -> None:
        async with self._manager.session() as db:
            entry = await db.get(KeyValueEntry, key)
            if entry is not None:
                await db.delete(entry)
                await db.commit()
