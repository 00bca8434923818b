"""
Import the JSON summary file into the SQL database.

Usage:
    python -m video_digest.migrate

Source and target come from JSON_STORE_PATH and DATABASE_URL.
"""
import asyncio
import sys

from loguru import logger

from video_digest.core.config import settings
from video_digest.core.exceptions import StorageError
from video_digest.core.logging import setup_logging
from video_digest.services.migration import migrate_json_to_sql


def main() -> int:
    setup_logging()
    logger.info("Starting migration from JSON to SQL...")
    try:
        asyncio.run(
            migrate_json_to_sql(
                settings.JSON_STORE_PATH,
                settings.DATABASE_URL,
                capacity=settings.SUMMARY_CACHE_CAPACITY,
            )
        )
    except StorageError as e:
        logger.error(f"Error during migration: {e.detail}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
