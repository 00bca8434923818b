"""
JSON file implementation of SummaryStore.

The whole record set lives in one JSON document of the form
{"summaries": [...]}. Every mutation reads the document, changes it in
memory and rewrites it atomically (temp file + rename).

Within one process an asyncio.Lock serializes read-modify-write cycles.
Separate processes writing the same file can still lose updates (last
writer wins); use SqlSummaryStore when several workers share a cache.
"""
import asyncio
import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from video_digest.core.constants import StorageConfig
from video_digest.core.exceptions import StorageReadError, StorageWriteError
from video_digest.core.stores.base import SummaryStore
from video_digest.models import CacheRecord, SummaryInput

# Field names used by files written before the subject/raw_text naming
_LEGACY_KEYS = {
    "video_id": "subject_id",
    "video_url": "source_url",
    "summary": "raw_text",
}

_INPUT_FIELDS = set(SummaryInput.model_fields)


def _decode_entry(entry: dict[str, Any]) -> CacheRecord:
    normalized = {_LEGACY_KEYS.get(key, key): value for key, value in entry.items()}
    return CacheRecord.model_validate(normalized)


class JsonFileSummaryStore(SummaryStore):
    """
    Whole-file SummaryStore.

    Example:
        async with JsonFileSummaryStore("summaries.json") as store:
            await store.upsert(summary, now=utc_now())
    """

    def __init__(self, path: str | Path):
        """
        Initialize the JSON store.

        Args:
            path: Location of the JSON document. Created on open() if missing.
        """
        self.path = Path(path)
        self._lock = asyncio.Lock()
        self._opened = False

    async def open(self) -> None:
        if self._opened:
            return
        try:
            await asyncio.to_thread(self._initialize_sync)
        except OSError as e:
            raise StorageWriteError(f"Could not initialize {self.path}: {e}", cause=e) from e
        self._opened = True
        logger.info(f"JSON summary store opened ({self.path})")

    async def close(self) -> None:
        self._opened = False

    def _initialize_sync(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write_sync([])
            logger.info(f"Initialized empty summary file at {self.path}")

    def _read_sync(self) -> list[CacheRecord]:
        """
        Load every record from disk.

        Raises:
            StorageReadError: The file is unreadable or not a summaries document.
        """
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            entries = data.get(StorageConfig.JSON_ROOT_KEY, [])
            return [_decode_entry(entry) for entry in entries]
        except (OSError, ValueError, AttributeError, TypeError, ValidationError) as e:
            raise StorageReadError(f"Could not read summaries from {self.path}: {e}", cause=e) from e

    def _write_sync(self, records: list[CacheRecord]) -> None:
        document = {
            StorageConfig.JSON_ROOT_KEY: [record.model_dump(mode="json") for record in records]
        }
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    async def _load(self) -> list[CacheRecord]:
        return await asyncio.to_thread(self._read_sync)

    async def _load_for_write(self) -> list[CacheRecord]:
        try:
            return await self._load()
        except StorageReadError as e:
            # Never overwrite a document we could not parse
            raise StorageWriteError(e.detail, cause=e.cause) from e

    async def _save(self, records: list[CacheRecord]) -> None:
        try:
            await asyncio.to_thread(self._write_sync, records)
        except OSError as e:
            raise StorageWriteError(f"Could not write summaries to {self.path}: {e}", cause=e) from e

    async def fetch(self, subject_id: str, style: str) -> Optional[CacheRecord]:
        records = await self._load()
        return next((r for r in records if r.key == (subject_id, style)), None)

    async def touch(self, subject_id: str, style: str, accessed_at: datetime) -> bool:
        async with self._lock:
            records = await self._load_for_write()
            for index, record in enumerate(records):
                if record.key == (subject_id, style):
                    records[index] = record.model_copy(update={"accessed_at": accessed_at})
                    await self._save(records)
                    return True
            return False

    async def upsert(self, summary: SummaryInput, now: datetime) -> None:
        async with self._lock:
            records = await self._load_for_write()
            new_record = CacheRecord(
                **summary.model_dump(include=_INPUT_FIELDS), created_at=now, accessed_at=now
            )

            for index, record in enumerate(records):
                if record.key == summary.key:
                    records[index] = new_record.model_copy(update={"created_at": record.created_at})
                    break
            else:
                records.append(new_record)

            await self._save(records)

    async def evict(self, capacity: int, keep: tuple[str, str]) -> int:
        async with self._lock:
            records = await self._load_for_write()
            overflow = len(records) - capacity
            if overflow <= 0:
                return 0

            candidates = sorted(
                (r for r in records if r.key != keep),
                key=lambda r: r.accessed_at,
            )
            doomed = {r.key for r in candidates[:overflow]}
            kept = [r for r in records if r.key not in doomed]
            await self._save(kept)

            evicted = len(records) - len(kept)
            logger.debug(f"Evicted {evicted} summaries from {self.path}")
            return evicted

    async def recent(self, limit: int) -> list[CacheRecord]:
        records = await self._load()
        records.sort(key=lambda r: r.accessed_at, reverse=True)
        return records[:limit]

    async def count(self) -> int:
        return len(await self._load())
