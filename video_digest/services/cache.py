"""
Bounded recency cache for generated summaries.

Records are keyed by (subject_id, style) and hold the raw generated text,
never parsed points; readers parse on the way out. Capacity is enforced
after every write by evicting the least recently accessed records.

Storage failures never escape this layer: reads degrade to "absent" and
writes report a failed SaveOutcome so the caller can still show a freshly
generated summary.
"""
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from video_digest.core.config import settings
from video_digest.core.exceptions import StorageError
from video_digest.core.stores.base import SummaryStore
from video_digest.models import CacheRecord, SaveOutcome, SummaryInput
from video_digest.utils import utc_now


class SummaryCache:
    """
    Recency-evicted cache over a SummaryStore.

    The cache holds no locks. Atomicity of each operation is whatever the
    store guarantees; an exists-then-put sequence from two callers may
    interleave.

    Attributes:
        store: The persistence backend.
        capacity: Maximum number of live records.
        clock: Source of the current time (aware UTC datetimes).
    """

    def __init__(
        self,
        store: SummaryStore,
        capacity: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the cache.

        Args:
            store: An opened SummaryStore.
            capacity: Maximum records to keep. Defaults to settings.SUMMARY_CACHE_CAPACITY.
            clock: Replaceable time source, mainly for tests.
        """
        self.store = store
        self.capacity = capacity if capacity is not None else settings.SUMMARY_CACHE_CAPACITY
        if self.capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {self.capacity}")
        self.clock = clock

    async def exists(self, subject_id: str, style: str) -> bool:
        """
        Check whether a summary is cached, without touching its access time.

        Returns:
            True if cached; False if absent or the store could not be read.
        """
        try:
            return await self.store.fetch(subject_id, style) is not None
        except StorageError as e:
            logger.warning(f"Cache lookup failed for {subject_id}/{style}, treating as miss: {e.detail}")
            return False

    async def get(self, subject_id: str, style: str) -> Optional[CacheRecord]:
        """
        Read a cached summary and mark it as accessed.

        Returns:
            The record with its refreshed accessed_at, or None on a miss or
            storage failure.
        """
        try:
            record = await self.store.fetch(subject_id, style)
            if record is None:
                return None

            now = self.clock()
            await self.store.touch(subject_id, style, now)
        except StorageError as e:
            logger.warning(f"Cache read failed for {subject_id}/{style}, treating as miss: {e.detail}")
            return None

        logger.debug(f"Cache hit for {subject_id}/{style}")
        return record.model_copy(update={"accessed_at": now})

    async def put(self, summary: SummaryInput) -> SaveOutcome:
        """
        Save a summary, then evict least recently accessed records over capacity.

        An existing record for the same key keeps its created_at. The record
        just written is never evicted.

        Args:
            summary: The summary to store.

        Returns:
            SaveOutcome describing whether the write happened and how many
            records were evicted. Never raises on storage failure.
        """
        try:
            await self.store.upsert(summary, now=self.clock())
        except StorageError as e:
            logger.error(f"Failed to cache summary {summary.subject_id}/{summary.style}: {e.detail}")
            return SaveOutcome.failed(e.detail)

        try:
            evicted = await self.store.evict(self.capacity, keep=summary.key)
        except StorageError as e:
            logger.error(f"Cached {summary.subject_id}/{summary.style} but eviction failed: {e.detail}")
            return SaveOutcome.over_capacity(f"Eviction failed: {e.detail}")

        if evicted:
            logger.info(f"Evicted {evicted} least recently used summaries (capacity {self.capacity})")
        logger.debug(f"Cached summary {summary.subject_id}/{summary.style}")
        return SaveOutcome.saved(evicted=evicted)

    async def list_recent(self, limit: Optional[int] = None) -> list[CacheRecord]:
        """
        List cached summaries, most recently accessed first.

        Args:
            limit: Maximum number of records. Defaults to settings.RECENT_SUMMARIES_LIMIT.

        Returns:
            Up to `limit` records; empty if the store could not be read.
        """
        limit = limit if limit is not None else settings.RECENT_SUMMARIES_LIMIT
        if limit <= 0:
            return []
        try:
            return await self.store.recent(limit)
        except StorageError as e:
            logger.warning(f"Listing recent summaries failed: {e.detail}")
            return []
