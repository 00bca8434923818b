import json
from unittest.mock import AsyncMock

import pytest

from video_digest.core.exceptions import StorageReadError, StorageWriteError
from video_digest.core.stores import SqlSummaryStore
from video_digest.services.migration import migrate_json_to_sql


def legacy_entry(video_id: str, accessed_at: str) -> dict:
    return {
        "video_id": video_id,
        "video_url": f"https://www.youtube.com/watch?v={video_id}",
        "title": f"Title {video_id}",
        "summary": f"0:01 summary of {video_id}",
        "style": "detailed",
        "created_at": "2025-01-01T00:00:00.000Z",
        "accessed_at": accessed_at,
    }


@pytest.mark.asyncio
async def test_migrates_all_records_and_backs_up(json_path, sqlite_url):
    json_path.write_text(
        json.dumps(
            {
                "summaries": [
                    legacy_entry("a", "2025-01-03T00:00:00.000Z"),
                    legacy_entry("b", "2025-01-01T00:00:00.000Z"),
                    legacy_entry("c", "2025-01-02T00:00:00.000Z"),
                ]
            }
        )
    )

    migrated = await migrate_json_to_sql(json_path, sqlite_url, capacity=100)

    assert migrated == 3
    backup = json_path.with_name("summaries.json.backup")
    assert backup.read_text() == json_path.read_text()

    async with SqlSummaryStore(sqlite_url) as store:
        assert await store.count() == 3
        # Relative recency survives the import
        assert [r.subject_id for r in await store.recent(3)] == ["a", "c", "b"]
        record = await store.fetch("b", "detailed")
        assert record.raw_text == "0:01 summary of b"
        assert record.title == "Title b"


@pytest.mark.asyncio
async def test_capacity_keeps_most_recent_records(json_path, sqlite_url):
    json_path.write_text(
        json.dumps(
            {
                "summaries": [
                    legacy_entry("a", "2025-01-03T00:00:00.000Z"),
                    legacy_entry("b", "2025-01-01T00:00:00.000Z"),
                    legacy_entry("c", "2025-01-02T00:00:00.000Z"),
                ]
            }
        )
    )

    await migrate_json_to_sql(json_path, sqlite_url, capacity=2)

    async with SqlSummaryStore(sqlite_url) as store:
        assert {r.subject_id for r in await store.recent(5)} == {"a", "c"}


@pytest.mark.asyncio
async def test_missing_file_is_noop(json_path, sqlite_url):
    assert await migrate_json_to_sql(json_path, sqlite_url, capacity=100) == 0
    assert not json_path.exists()


@pytest.mark.asyncio
async def test_empty_file_is_noop(json_path, sqlite_url):
    json_path.write_text(json.dumps({"summaries": []}))
    assert await migrate_json_to_sql(json_path, sqlite_url, capacity=100) == 0
    assert not json_path.with_name("summaries.json.backup").exists()


@pytest.mark.asyncio
async def test_corrupt_file_raises(json_path, sqlite_url):
    json_path.write_text("[broken")
    with pytest.raises(StorageReadError):
        await migrate_json_to_sql(json_path, sqlite_url, capacity=100)


@pytest.mark.asyncio
async def test_eviction_failure_does_not_stop_migration(json_path, sqlite_url, monkeypatch):
    json_path.write_text(
        json.dumps(
            {
                "summaries": [
                    legacy_entry("a", "2025-01-03T00:00:00.000Z"),
                    legacy_entry("b", "2025-01-01T00:00:00.000Z"),
                ]
            }
        )
    )
    monkeypatch.setattr(SqlSummaryStore, "evict", AsyncMock(side_effect=StorageWriteError("locked")))

    migrated = await migrate_json_to_sql(json_path, sqlite_url, capacity=1)

    assert migrated == 2
    async with SqlSummaryStore(sqlite_url) as store:
        assert await store.count() == 2
