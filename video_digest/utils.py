"""
Small helpers shared across services and stores.
"""
import re
from datetime import datetime, timezone
from typing import Optional

# Matches watch?v=, youtu.be/, embed/, v/, e/ and u/<user>/ URL shapes
_VIDEO_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|e/|u/\w+/|embed/|v=)([^#&?]*).*")
VIDEO_ID_LENGTH = 11


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Serialize a datetime to a fixed-width ISO-8601 UTC string.

    Microseconds are always present so lexical order equals chronological
    order, which both storage backends rely on when sorting by access time.
    Naive datetimes are assumed to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    """Parse an ISO-8601 string written by `to_iso` (or any offset-bearing ISO string)."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the YouTube video ID from a URL.

    Args:
        url: A YouTube watch, short, embed or legacy URL.

    Returns:
        The 11-character video ID, or None if the URL has no valid ID.
    """
    if not url:
        return None
    match = _VIDEO_ID_PATTERN.match(url.strip())
    if match and len(match.group(2)) == VIDEO_ID_LENGTH:
        return match.group(2)
    return None
