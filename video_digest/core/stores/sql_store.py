"""
SQLAlchemy implementation of SummaryStore.

Backed by any async SQLAlchemy engine: SQLite through aiosqlite for a
single process, PostgreSQL through asyncpg when several workers share the
cache. Each operation is its own session and transaction.
"""
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from video_digest.core.constants import StorageConfig
from video_digest.core.db import Base, create_engine, create_session_factory
from video_digest.core.exceptions import ConfigurationError, StorageReadError, StorageWriteError
from video_digest.core.stores.base import SummaryStore
from video_digest.models import CacheRecord, SummaryInput
from video_digest.models.sql import SummaryModel
from video_digest.repositories.summary import SUPPORTED_DIALECTS, SummaryRepository
from video_digest.utils import to_iso

# Retry transient lock contention (e.g. SQLite "database is locked")
_retry_transient = retry(
    stop=stop_after_attempt(StorageConfig.WRITE_RETRY_ATTEMPTS),
    wait=wait_exponential(
        multiplier=StorageConfig.WRITE_RETRY_MIN_WAIT,
        min=StorageConfig.WRITE_RETRY_MIN_WAIT,
        max=StorageConfig.WRITE_RETRY_MAX_WAIT,
    ),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)


def _to_record(row: SummaryModel) -> CacheRecord:
    return CacheRecord(
        subject_id=row.subject_id,
        style=row.style,
        source_url=row.source_url,
        title=row.title,
        raw_text=row.raw_text,
        created_at=row.created_at,
        accessed_at=row.accessed_at,
    )


class SqlSummaryStore(SummaryStore):
    """
    Transactional SummaryStore.

    The unique (subject_id, style) constraint plus a single
    INSERT ... ON CONFLICT statement make concurrent upserts of the same key safe.

    Example:
        async with SqlSummaryStore("sqlite+aiosqlite:///./summaries.db") as store:
            await store.upsert(summary, now=utc_now())
    """

    def __init__(self, db_url: str, engine: Optional[AsyncEngine] = None):
        """
        Initialize the SQL store.

        Args:
            db_url: SQLAlchemy async database URL.
            engine: Pre-built engine to use instead of creating one from db_url.
                The store then does not dispose it on close.
        """
        self.db_url = db_url
        self._engine = engine
        self._owns_engine = engine is None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def open(self) -> None:
        if self._session_factory is not None:
            return
        if self._engine is None:
            self._engine = create_engine(self.db_url)
        try:
            dialect = self._engine.dialect.name
            if dialect not in SUPPORTED_DIALECTS:
                raise ConfigurationError(
                    f"Unsupported database dialect for summaries: {dialect} "
                    f"(expected one of {', '.join(sorted(SUPPORTED_DIALECTS))})"
                )
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except ConfigurationError:
            await self._release_engine()
            raise
        except SQLAlchemyError as e:
            await self._release_engine()
            raise StorageWriteError(f"Could not initialize summaries table: {e}", cause=e) from e
        self._session_factory = create_session_factory(self._engine)
        logger.info(f"SQL summary store opened ({self._engine.url.render_as_string(hide_password=True)})")

    async def close(self) -> None:
        await self._release_engine()
        self._session_factory = None

    async def _release_engine(self) -> None:
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
            self._engine = None

    def _session(self) -> AsyncSession:
        if self._session_factory is None:
            raise RuntimeError("SqlSummaryStore used before open()")
        return self._session_factory()

    async def fetch(self, subject_id: str, style: str) -> Optional[CacheRecord]:
        try:
            async with self._session() as session:
                row = await SummaryRepository(session).get_summary(subject_id, style)
        except SQLAlchemyError as e:
            raise StorageReadError(f"Failed to read summary {subject_id}/{style}: {e}", cause=e) from e
        return _to_record(row) if row is not None else None

    async def touch(self, subject_id: str, style: str, accessed_at: datetime) -> bool:
        try:
            return await self._touch(subject_id, style, to_iso(accessed_at))
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Failed to touch summary {subject_id}/{style}: {e}", cause=e) from e

    @_retry_transient
    async def _touch(self, subject_id: str, style: str, accessed_at: str) -> bool:
        async with self._session() as session:
            return await SummaryRepository(session).touch_summary(subject_id, style, accessed_at)

    async def upsert(self, summary: SummaryInput, now: datetime) -> None:
        stamp = to_iso(now)
        values = {
            "subject_id": summary.subject_id,
            "style": summary.style,
            "source_url": summary.source_url,
            "title": summary.title,
            "raw_text": summary.raw_text,
            "created_at": stamp,
            "accessed_at": stamp,
        }
        try:
            await self._upsert(values)
        except SQLAlchemyError as e:
            raise StorageWriteError(
                f"Failed to save summary {summary.subject_id}/{summary.style}: {e}", cause=e
            ) from e

    @_retry_transient
    async def _upsert(self, values: dict) -> None:
        async with self._session() as session:
            await SummaryRepository(session).upsert_summary(values)

    async def evict(self, capacity: int, keep: tuple[str, str]) -> int:
        try:
            return await self._evict(capacity, keep)
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Failed to evict summaries: {e}", cause=e) from e

    @_retry_transient
    async def _evict(self, capacity: int, keep: tuple[str, str]) -> int:
        async with self._session() as session:
            repo = SummaryRepository(session)
            overflow = await repo.count_summaries() - capacity
            if overflow <= 0:
                return 0
            return await repo.delete_least_recent(overflow, keep)

    async def recent(self, limit: int) -> list[CacheRecord]:
        try:
            async with self._session() as session:
                rows = await SummaryRepository(session).get_recent_summaries(limit)
        except SQLAlchemyError as e:
            raise StorageReadError(f"Failed to list recent summaries: {e}", cause=e) from e
        return [_to_record(row) for row in rows]

    async def count(self) -> int:
        try:
            async with self._session() as session:
                return await SummaryRepository(session).count_summaries()
        except SQLAlchemyError as e:
            raise StorageReadError(f"Failed to count summaries: {e}", cause=e) from e
