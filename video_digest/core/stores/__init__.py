"""
Persistence backends for the summary cache.
"""
from video_digest.core.stores.base import SummaryStore
from video_digest.core.stores.json_store import JsonFileSummaryStore
from video_digest.core.stores.sql_store import SqlSummaryStore

__all__ = [
    "SummaryStore",
    "JsonFileSummaryStore",
    "SqlSummaryStore",
]
