"""
Enums for type-safe values across the application.
"""
from enum import Enum


class StoreBackendType(str, Enum):
    """Supported persistence backends for the summary cache."""
    SQL = "sql"
    JSON = "json"


class SaveStatus(str, Enum):
    """Outcome of a cache write."""
    SAVED = "saved"
    SAVED_WITH_EVICTIONS = "saved_with_evictions"
    SAVED_OVER_CAPACITY = "saved_over_capacity"
    FAILED = "failed"


class SummaryStyle(str, Enum):
    """Summary styles the generator knows how to produce."""
    DETAILED = "detailed"
    CONCISE = "concise"
    BULLET = "bullet"
    ANALYTICAL = "analytical"
    REVIEW = "review"
