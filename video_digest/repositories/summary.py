"""
Repository layer for managing SummaryModel data.
"""
from typing import Any, List, Optional

from sqlalchemy import and_, delete, func as sql_func, not_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from video_digest.core.exceptions import ConfigurationError
from video_digest.models.sql import SummaryModel

# Dialects with INSERT ... ON CONFLICT DO UPDATE support
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}
SUPPORTED_DIALECTS = frozenset(_UPSERT_INSERTS)

# Columns a re-save may overwrite; created_at is deliberately absent
_MUTABLE_COLUMNS = ("source_url", "title", "raw_text", "accessed_at")


class SummaryRepository:
    """
    Repository layer for cached summaries.

    Every method runs and commits within the session it was given.
    """

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize the SummaryRepository.

        Args:
            db: Async database session.
        """
        self.db = db

    async def get_summary(self, subject_id: str, style: str) -> Optional[SummaryModel]:
        """
        Retrieve a summary by its cache key.

        Returns:
            The SummaryModel if found, None otherwise.
        """
        query = select(SummaryModel).where(
            SummaryModel.subject_id == subject_id,
            SummaryModel.style == style,
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def touch_summary(self, subject_id: str, style: str, accessed_at: str) -> bool:
        """
        Stamp a summary as accessed.

        Returns:
            True if a row was updated.
        """
        query = (
            update(SummaryModel)
            .where(SummaryModel.subject_id == subject_id, SummaryModel.style == style)
            .values(accessed_at=accessed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(query)
        await self.db.commit()
        return (result.rowcount or 0) > 0

    async def upsert_summary(self, values: dict[str, Any]) -> None:
        """
        Insert a summary or update the existing row with the same key.

        The original created_at of an existing row is never overwritten.

        Args:
            values: Column values for every SummaryModel column except id.

        Raises:
            ConfigurationError: The session's dialect has no ON CONFLICT upsert.
        """
        dialect = self.db.bind.dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ConfigurationError(f"Unsupported database dialect for summaries: {dialect}")

        stmt = insert(SummaryModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["subject_id", "style"],
            set_={column: getattr(stmt.excluded, column) for column in _MUTABLE_COLUMNS},
        )
        await self.db.execute(stmt)
        await self.db.commit()

    async def count_summaries(self) -> int:
        """Count all live summaries."""
        query = select(sql_func.count()).select_from(SummaryModel)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def delete_least_recent(self, count: int, keep: tuple[str, str]) -> int:
        """
        Delete the `count` least recently accessed summaries.

        Args:
            count: Number of rows to delete.
            keep: Cache key that must survive (the row just written).

        Returns:
            Number of rows deleted.
        """
        if count <= 0:
            return 0

        keep_subject, keep_style = keep
        oldest = (
            select(SummaryModel.id)
            .where(not_(and_(SummaryModel.subject_id == keep_subject, SummaryModel.style == keep_style)))
            .order_by(SummaryModel.accessed_at.asc(), SummaryModel.id.asc())
            .limit(count)
        )
        query = (
            delete(SummaryModel)
            .where(SummaryModel.id.in_(oldest))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(query)
        await self.db.commit()
        return result.rowcount or 0

    async def get_recent_summaries(self, limit: int) -> List[SummaryModel]:
        """
        Retrieve summaries ordered by last access, newest first.

        Args:
            limit: Maximum number of summaries to return.
        """
        query = (
            select(SummaryModel)
            .order_by(SummaryModel.accessed_at.desc(), SummaryModel.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
