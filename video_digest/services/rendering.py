"""
Turn parsed points back into plain text, e.g. as context for follow-up prompts.
"""
from typing import Iterable

from video_digest.models import SummaryPoint


def render_point(point: SummaryPoint) -> str:
    """Format one point as ``[timestamp] text``, or just the text without a timestamp."""
    if point.timestamp:
        return f"[{point.timestamp}] {point.text}"
    return point.text


def render_points(points: Iterable[SummaryPoint]) -> str:
    """Join points into one text block, separated by blank lines."""
    return "\n\n".join(render_point(point) for point in points)
