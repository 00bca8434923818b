"""
Cache-aware summary retrieval.

Ties the block parser and the recency cache together: serve a cached
summary when one exists for (video, style), otherwise ask the generator
for new text, parse it and cache the raw text.

Text generation and title lookup are injected collaborators; this module
knows nothing about models, prompts or YouTube APIs.
"""
from typing import Awaitable, Callable, Optional

from loguru import logger

from video_digest.core.constants import SummaryDefaults
from video_digest.core.exceptions import GenerationError, InvalidSourceError
from video_digest.models import RecentSummary, SummaryInput, SummaryResult, SummaryStyle
from video_digest.services.cache import SummaryCache
from video_digest.services.parser import parse, parse_cached
from video_digest.utils import extract_video_id

GenerateText = Callable[[str, str], Awaitable[str]]
FetchTitle = Callable[[str], Awaitable[str]]


class SummaryService:
    """
    Serve summaries from cache, generating and caching them on a miss.

    Example:
        service = SummaryService(cache, generate=llm_summarize, fetch_title=oembed_title)
        result = await service.summarize("https://youtu.be/dQw4w9WgXcQ", style="concise")
    """

    def __init__(self, cache: SummaryCache, generate: GenerateText, fetch_title: FetchTitle):
        """
        Initialize the summary service.

        Args:
            cache: Recency cache holding raw summaries.
            generate: Async callable (subject_id, style) -> generated text.
            fetch_title: Async callable (subject_id) -> display title.
        """
        self.cache = cache
        self.generate = generate
        self.fetch_title = fetch_title

    async def summarize(
        self,
        source_url: str,
        style: str = SummaryStyle.DETAILED.value,
        subject_id: Optional[str] = None,
    ) -> SummaryResult:
        """
        Return the summary of a video, from cache when possible.

        Args:
            source_url: The video URL.
            style: Summary style; part of the cache key.
            subject_id: Explicit video ID. Extracted from source_url when omitted.

        Returns:
            SummaryResult with parsed points. For fresh summaries `save` holds
            the cache write outcome; a failed write does not fail the call.

        Raises:
            InvalidSourceError: No video ID could be determined.
            GenerationError: The generator failed on a cache miss.
        """
        subject_id = subject_id or extract_video_id(source_url)
        if not subject_id:
            raise InvalidSourceError(source_url)

        if await self.cache.exists(subject_id, style):
            record = await self.cache.get(subject_id, style)
            if record is not None:
                logger.info(f"Using cached summary for video ID: {subject_id}, style: {style}")
                return SummaryResult(
                    subject_id=subject_id,
                    title=record.title,
                    style=style,
                    points=parse_cached(record.raw_text),
                    cached=True,
                )

        title = await self._resolve_title(subject_id)

        logger.info(f"Generating {style} summary for video ID: {subject_id}")
        try:
            raw_text = await self.generate(subject_id, style)
        except Exception as e:
            raise GenerationError(subject_id, style, str(e)) from e

        points = parse(raw_text)
        outcome = await self.cache.put(
            SummaryInput(
                subject_id=subject_id,
                style=style,
                source_url=source_url,
                title=title,
                raw_text=raw_text,
            )
        )

        return SummaryResult(
            subject_id=subject_id,
            title=title,
            style=style,
            points=points,
            cached=False,
            save=outcome,
        )

    async def recent(self, limit: Optional[int] = None) -> list[RecentSummary]:
        """
        List recently accessed summaries with their points parsed.

        Args:
            limit: Maximum number of summaries. Defaults to the configured limit.
        """
        records = await self.cache.list_recent(limit)
        return [
            RecentSummary(
                subject_id=record.subject_id,
                source_url=record.source_url,
                title=record.title,
                style=record.style,
                points=parse_cached(record.raw_text),
                created_at=record.created_at,
                accessed_at=record.accessed_at,
            )
            for record in records
        ]

    async def _resolve_title(self, subject_id: str) -> str:
        try:
            title = await self.fetch_title(subject_id)
        except Exception as e:
            logger.warning(f"Failed to fetch title for {subject_id}: {e}")
            return SummaryDefaults.UNTITLED
        return title or SummaryDefaults.UNTITLED
