"""
Factory functions wiring stores, cache and services from configuration.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from video_digest.core.config import Settings, settings as default_settings
from video_digest.core.exceptions import ConfigurationError
from video_digest.core.stores import JsonFileSummaryStore, SqlSummaryStore, SummaryStore
from video_digest.models.enums import StoreBackendType
from video_digest.services.cache import SummaryCache


def create_store(config: Optional[Settings] = None) -> SummaryStore:
    """
    Build the configured summary store. The store still has to be opened.

    Default: SQL (configured in settings.SUMMARY_STORE_BACKEND)
    """
    config = config or default_settings
    backend = config.SUMMARY_STORE_BACKEND

    if backend == StoreBackendType.SQL:
        return SqlSummaryStore(config.DATABASE_URL)
    elif backend == StoreBackendType.JSON:
        return JsonFileSummaryStore(config.JSON_STORE_PATH)
    else:
        raise ConfigurationError(f"Unknown summary store backend: {backend}")


@asynccontextmanager
async def open_summary_cache(config: Optional[Settings] = None) -> AsyncIterator[SummaryCache]:
    """
    Open the configured store and yield a cache over it.

    The store is closed when the block exits, including on errors.

    Example:
        async with open_summary_cache() as cache:
            record = await cache.get("dQw4w9WgXcQ", "detailed")
    """
    config = config or default_settings
    async with create_store(config) as store:
        yield SummaryCache(store, capacity=config.SUMMARY_CACHE_CAPACITY)
