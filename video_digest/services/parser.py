"""
Block parser turning free-form generated summaries into timestamped points.

Models rarely follow a rigid output format, so the parser segments text
with a few line-level signals instead of a grammar:

1. A timestamp anywhere in a line (``1:23``, ``12:34``, ``1:02:03``) starts a new point.
2. A markdown heading starts a new point; the current timestamp carries over.
3. Two consecutive blank lines close the current point; the timestamp carries over.
4. Fenced blocks (```) are copied verbatim and never scanned.

The scan is a fold of `step` over (line, next_line) pairs with an explicit,
immutable `ScanState`, so every transition can be exercised on its own.
"""
import hashlib
import re
from dataclasses import dataclass, replace
from functools import reduce
from itertools import zip_longest
from typing import Optional

from cachetools import LRUCache
from loguru import logger

from video_digest.core.config import settings
from video_digest.models import SummaryPoint

TIMESTAMP_PATTERN = re.compile(r"(\d+:\d+(?::\d+)?)", re.ASCII)
HEADING_PATTERN = re.compile(r"^#{1,6}\s")
SEPARATOR_PATTERN = re.compile(r"^[:\s-]+")
FENCE_MARKER = "```"

# Consecutive blank lines that close the current point
BLANK_LINES_PER_BREAK = 2


@dataclass(frozen=True)
class ScanState:
    """
    Parser state between two lines.

    Attributes:
        timestamp: Timestamp assigned to the point being accumulated.
        buffer: Text of the point being accumulated.
        blank_lines: Consecutive blank lines seen outside fences.
        in_fence: Whether the scan is inside a fenced block.
        skip_next: The next line was already consumed as a timestamp body.
        points: Points emitted so far, in source order.
    """

    timestamp: str = ""
    buffer: str = ""
    blank_lines: int = 0
    in_fence: bool = False
    skip_next: bool = False
    points: tuple[SummaryPoint, ...] = ()

    def flush(self) -> "ScanState":
        """Emit the buffered point if it has any content."""
        body = self.buffer.strip()
        if not body:
            return self
        point = SummaryPoint(timestamp=self.timestamp, text=body)
        return replace(self, buffer="", points=self.points + (point,))


def append_line(state: ScanState, line: str) -> ScanState:
    return replace(state, buffer=state.buffer + line + "\n")


def on_fence(state: ScanState, line: str) -> ScanState:
    return replace(append_line(state, line), in_fence=not state.in_fence)


def on_blank_line(state: ScanState) -> ScanState:
    state = replace(state, blank_lines=state.blank_lines + 1, buffer=state.buffer + "\n")
    if state.blank_lines >= BLANK_LINES_PER_BREAK:
        return state.flush()
    return state


def on_timestamp(
    state: ScanState, line: str, match: re.Match, next_line: Optional[str]
) -> ScanState:
    """
    Start a new point at a timestamp.

    The body is whatever follows the timestamp on the same line, minus
    leading separators. With nothing after the timestamp, the following
    non-blank line is taken as the body and skipped by the scan.
    """
    state = state.flush()
    rest = line[match.end():]
    skip_next = False

    if rest.strip():
        body = SEPARATOR_PATTERN.sub("", rest).strip()
    elif next_line is not None and next_line.strip():
        body = next_line.strip()
        skip_next = True
    else:
        body = ""

    return replace(
        state,
        timestamp=match.group(1),
        buffer=body + "\n",
        skip_next=skip_next,
    )


def on_heading(state: ScanState, line: str) -> ScanState:
    return replace(state.flush(), buffer=line + "\n")


def step(state: ScanState, pair: tuple[str, Optional[str]]) -> ScanState:
    """Advance the scan by one line."""
    line, next_line = pair

    if state.skip_next:
        return replace(state, skip_next=False)

    if line.strip().startswith(FENCE_MARKER):
        return on_fence(state, line)

    if state.in_fence:
        return append_line(state, line)

    if not line.strip():
        return on_blank_line(state)

    state = replace(state, blank_lines=0)

    match = TIMESTAMP_PATTERN.search(line)
    if match:
        return on_timestamp(state, line, match, next_line)

    if HEADING_PATTERN.match(line.strip()):
        return on_heading(state, line)

    return append_line(state, line)


def parse(text: str) -> list[SummaryPoint]:
    """
    Parse generated summary text into ordered points.

    Never raises. Blank input yields no points; if parsing fails the whole
    text is returned as a single point without a timestamp.

    Args:
        text: Plain or markdown text produced by the summarizer.

    Returns:
        Points in the order they appear in the text.
    """
    try:
        if not text or not text.strip():
            return []

        lines = text.split("\n")
        final = reduce(step, zip_longest(lines, lines[1:]), ScanState()).flush()
        points = list(final.points)

        if not points:
            return [SummaryPoint(timestamp="", text=text.strip())]
        return points
    except Exception as e:
        logger.error(f"Failed to parse summary, returning it as one point: {e}")
        return [SummaryPoint(timestamp="", text=text)]


# Parsed points of recently read summaries, keyed by content hash
parsed_cache: LRUCache[str, tuple[SummaryPoint, ...]] = LRUCache(maxsize=settings.PARSED_CACHE_SIZE)


def get_cache_key(text: str) -> str:
    """Generate a cache key from summary text."""
    return hashlib.sha256(text.encode()).hexdigest()


def parse_cached(text: str) -> list[SummaryPoint]:
    """
    Parse with memoization for texts read back from the summary cache.

    Returns:
        A new list on every call; the points themselves are immutable.
    """
    key = get_cache_key(text)
    points = parsed_cache.get(key)
    if points is None:
        points = tuple(parse(text))
        parsed_cache[key] = points
    return list(points)
