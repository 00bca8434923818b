"""
Shared pytest fixtures and configuration.
"""
import pytest
import pytest_asyncio

from video_digest.core.stores import JsonFileSummaryStore, SqlSummaryStore
from video_digest.services.cache import SummaryCache
from video_digest.services.parser import parsed_cache
from tests.utils.factories import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def clear_parsed_cache():
    """Keep memoized parses from leaking between tests."""
    parsed_cache.clear()
    yield
    parsed_cache.clear()


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'summaries.db'}"


@pytest.fixture
def json_path(tmp_path):
    return tmp_path / "summaries.json"


@pytest_asyncio.fixture
async def sql_store(sqlite_url):
    async with SqlSummaryStore(sqlite_url) as store:
        yield store


@pytest_asyncio.fixture
async def json_store(json_path):
    async with JsonFileSummaryStore(json_path) as store:
        yield store


@pytest_asyncio.fixture(params=["sql", "json"])
async def store(request, sqlite_url, json_path):
    """Run the test once per storage backend."""
    if request.param == "sql":
        backend = SqlSummaryStore(sqlite_url)
    else:
        backend = JsonFileSummaryStore(json_path)
    async with backend:
        yield backend


@pytest.fixture
def cache(store, clock):
    return SummaryCache(store, capacity=100, clock=clock)
