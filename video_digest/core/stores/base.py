"""
Abstract base class for summary stores.

This module defines a backend-neutral persistence interface for cached
summaries. Concrete implementations (SQL database, JSON file) must
implement this interface.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from video_digest.models import CacheRecord, SummaryInput


class SummaryStore(ABC):
    """
    Abstract interface for summary persistence.

    Implementations must provide:
    - fetch: Read one record by (subject_id, style)
    - touch: Stamp a record as accessed
    - upsert: Insert or replace a record, keeping its original created_at
    - evict: Trim the store down to a capacity by oldest accessed_at
    - recent: List records by accessed_at, newest first
    - count: Number of live records

    Read failures raise StorageReadError, write failures StorageWriteError.
    The store must be opened before use; it is an async context manager.

    Example:
        async with SqlSummaryStore("sqlite+aiosqlite:///summaries.db") as store:
            await store.upsert(summary, now=utc_now())
            record = await store.fetch("dQw4w9WgXcQ", "detailed")
    """

    async def __aenter__(self) -> "SummaryStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @abstractmethod
    async def open(self) -> None:
        """Acquire the backing resource and make sure the schema exists."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the backing resource. Safe to call more than once."""
        ...

    @abstractmethod
    async def fetch(self, subject_id: str, style: str) -> Optional[CacheRecord]:
        """
        Read one record.

        Returns:
            The record, or None if the key is not stored.
        """
        ...

    @abstractmethod
    async def touch(self, subject_id: str, style: str, accessed_at: datetime) -> bool:
        """
        Set accessed_at for one record.

        Returns:
            True if the record existed.
        """
        ...

    @abstractmethod
    async def upsert(self, summary: SummaryInput, now: datetime) -> None:
        """
        Write a record.

        A new key gets created_at = accessed_at = now. An existing key keeps
        its created_at and has every other field replaced.
        """
        ...

    @abstractmethod
    async def evict(self, capacity: int, keep: tuple[str, str]) -> int:
        """
        Delete the least recently accessed records until at most `capacity` remain.

        Args:
            capacity: Maximum number of records to keep.
            keep: Cache key that must never be evicted.

        Returns:
            Number of records deleted.
        """
        ...

    @abstractmethod
    async def recent(self, limit: int) -> list[CacheRecord]:
        """List up to `limit` records sorted by accessed_at descending."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Number of live records."""
        ...
