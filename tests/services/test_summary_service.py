import pytest
from unittest.mock import AsyncMock

from video_digest.core.exceptions import GenerationError, InvalidSourceError, StorageWriteError
from video_digest.core.stores import SummaryStore
from video_digest.models import SaveStatus, SummaryPoint
from video_digest.services.cache import SummaryCache
from video_digest.services.summary import SummaryService

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
VIDEO_ID = "dQw4w9WgXcQ"
GENERATED = "0:00 Intro\n1:30 - The main point\n## Verdict\nWorth watching"


@pytest.fixture
def generate():
    return AsyncMock(return_value=GENERATED)


@pytest.fixture
def fetch_title():
    return AsyncMock(return_value="Never Gonna Give You Up")


@pytest.fixture
def summary_service(json_store, clock, generate, fetch_title):
    cache = SummaryCache(json_store, capacity=10, clock=clock)
    return SummaryService(cache, generate=generate, fetch_title=fetch_title)


@pytest.mark.asyncio
async def test_miss_generates_parses_and_caches(summary_service, generate, fetch_title):
    result = await summary_service.summarize(VIDEO_URL, style="detailed")

    generate.assert_awaited_once_with(VIDEO_ID, "detailed")
    fetch_title.assert_awaited_once_with(VIDEO_ID)
    assert result.cached is False
    assert result.title == "Never Gonna Give You Up"
    assert result.save.status == SaveStatus.SAVED
    assert result.points == [
        SummaryPoint(timestamp="0:00", text="Intro"),
        SummaryPoint(timestamp="1:30", text="The main point"),
        SummaryPoint(timestamp="1:30", text="## Verdict\nWorth watching"),
    ]

    stored = await summary_service.cache.store.fetch(VIDEO_ID, "detailed")
    assert stored.raw_text == GENERATED
    assert stored.source_url == VIDEO_URL


@pytest.mark.asyncio
async def test_hit_serves_cached_points_without_generating(summary_service, generate):
    first = await summary_service.summarize(VIDEO_URL)
    second = await summary_service.summarize("https://youtu.be/dQw4w9WgXcQ")

    assert generate.await_count == 1
    assert second.cached is True
    assert second.save is None
    assert second.points == first.points
    assert second.title == first.title


@pytest.mark.asyncio
async def test_each_style_is_generated_separately(summary_service, generate):
    await summary_service.summarize(VIDEO_URL, style="detailed")
    await summary_service.summarize(VIDEO_URL, style="concise")

    assert generate.await_count == 2


@pytest.mark.asyncio
async def test_explicit_subject_id_skips_url_parsing(summary_service, generate):
    result = await summary_service.summarize("local-file.mp4", subject_id="lecture-01")

    generate.assert_awaited_once_with("lecture-01", "detailed")
    assert result.subject_id == "lecture-01"


@pytest.mark.asyncio
async def test_invalid_url_is_rejected(summary_service, generate):
    with pytest.raises(InvalidSourceError):
        await summary_service.summarize("https://example.com/not-a-video")
    generate.assert_not_called()


@pytest.mark.asyncio
async def test_generation_failure_propagates_and_caches_nothing(summary_service, generate):
    generate.side_effect = RuntimeError("quota exceeded")

    with pytest.raises(GenerationError) as exc_info:
        await summary_service.summarize(VIDEO_URL)

    assert "quota exceeded" in exc_info.value.detail
    assert await summary_service.cache.store.count() == 0


@pytest.mark.asyncio
async def test_title_failure_falls_back(summary_service, fetch_title):
    fetch_title.side_effect = ConnectionError("offline")

    result = await summary_service.summarize(VIDEO_URL)

    assert result.title == "Untitled Video"


@pytest.mark.asyncio
async def test_cache_write_failure_still_returns_summary(clock, generate, fetch_title):
    store = AsyncMock(spec=SummaryStore)
    store.fetch.return_value = None
    store.upsert.side_effect = StorageWriteError("read-only filesystem")
    service = SummaryService(SummaryCache(store, capacity=10, clock=clock), generate, fetch_title)

    result = await service.summarize(VIDEO_URL)

    assert result.cached is False
    assert len(result.points) == 3
    assert result.save.status == SaveStatus.FAILED
    assert result.save.reason == "read-only filesystem"


@pytest.mark.asyncio
async def test_recent_returns_parsed_points_newest_first(summary_service, generate):
    await summary_service.summarize(VIDEO_URL, style="detailed")
    generate.return_value = "Plain text summary"
    await summary_service.summarize(VIDEO_URL, style="concise")

    recent = await summary_service.recent(limit=5)

    assert [r.style for r in recent] == ["concise", "detailed"]
    assert recent[0].points == [SummaryPoint(timestamp="", text="Plain text summary")]
    assert recent[1].points[0] == SummaryPoint(timestamp="0:00", text="Intro")
