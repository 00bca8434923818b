"""
Application-wide constants and limits.

Grouped into static classes for namespace management and discoverability.
"""


class CacheConfig:
    """Configuration for the summary cache."""
    DEFAULT_CAPACITY = 100
    DEFAULT_RECENT_LIMIT = 10
    PARSED_CACHE_SIZE = 256  # Parsed raw texts kept in memory


class StorageConfig:
    """Configuration for persistence backends."""
    TABLE_NAME = "summaries"
    JSON_ROOT_KEY = "summaries"
    BACKUP_SUFFIX = ".backup"
    WRITE_RETRY_ATTEMPTS = 3
    WRITE_RETRY_MIN_WAIT = 0.05  # Seconds
    WRITE_RETRY_MAX_WAIT = 1.0


class SummaryDefaults:
    """Fallback values used when collaborators give nothing useful."""
    UNTITLED = "Untitled Video"
