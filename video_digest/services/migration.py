"""
One-off import of a JSON summary file into the SQL store.
"""
import shutil
from pathlib import Path

from loguru import logger

from video_digest.core.constants import StorageConfig
from video_digest.core.exceptions import StorageWriteError
from video_digest.core.stores import JsonFileSummaryStore, SqlSummaryStore
from video_digest.models import SaveStatus, SummaryInput
from video_digest.services.cache import SummaryCache


async def migrate_json_to_sql(json_path: str | Path, db_url: str, capacity: int) -> int:
    """
    Copy every record of a JSON summary file into a SQL database.

    Records go through SummaryCache.put, so they get fresh access stamps
    and the SQL capacity limit applies. The JSON file is left in place and
    copied to ``<name>.backup`` after a successful import.

    Args:
        json_path: Path of the JSON summary document.
        db_url: Async SQLAlchemy URL of the target database.
        capacity: Capacity of the target cache.

    Returns:
        Number of records written. 0 if the file is missing or empty.

    Raises:
        StorageReadError: The JSON file exists but cannot be parsed.
        StorageWriteError: A record could not be written to the database.
    """
    json_path = Path(json_path)
    if not json_path.exists():
        logger.info("No JSON summary file found. Migration complete (nothing to migrate).")
        return 0

    # Read directly instead of open() so a missing file is never created
    source = JsonFileSummaryStore(json_path)
    count = await source.count()
    if count == 0:
        logger.info("JSON summary file is empty. Migration complete (nothing to migrate).")
        return 0

    # Oldest access first so the most recently used records win under the capacity limit
    records = list(reversed(await source.recent(count)))
    logger.info(f"Found {len(records)} records to migrate.")

    migrated = 0
    async with SqlSummaryStore(db_url) as target:
        cache = SummaryCache(target, capacity=capacity)
        for record in records:
            outcome = await cache.put(
                SummaryInput.model_validate(record.model_dump(include=set(SummaryInput.model_fields)))
            )
            if outcome.status == SaveStatus.SAVED_OVER_CAPACITY:
                logger.warning(f"Migrated {record.subject_id}/{record.style} but {outcome.reason}")
            elif not outcome.ok:
                raise StorageWriteError(
                    f"Migration stopped at {record.subject_id}/{record.style}: {outcome.reason}"
                )
            migrated += 1

    backup_path = json_path.with_name(json_path.name + StorageConfig.BACKUP_SUFFIX)
    shutil.copyfile(json_path, backup_path)
    logger.info(f"Migration completed: {migrated} records. Original JSON backed up to {backup_path}")
    return migrated
