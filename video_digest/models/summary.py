"""
Pydantic models for parsed summaries and cached records.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from video_digest.models.enums import SaveStatus
from video_digest.utils import from_iso, to_iso


class SummaryPoint(BaseModel):
    """One logical unit of a generated summary: an optional timestamp and its text."""

    timestamp: str = ""
    text: str

    model_config = ConfigDict(frozen=True)


class SummaryInput(BaseModel):
    """Payload accepted by the cache for a write."""

    subject_id: str = Field(min_length=1)
    style: str = Field(min_length=1)
    source_url: str
    title: str
    raw_text: str

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple[str, str]:
        return self.subject_id, self.style


class CacheRecord(SummaryInput):
    """
    A persisted summary.

    Attributes:
        subject_id: The video (or other subject) the summary is about.
        style: The summary variant; together with subject_id forms the cache key.
        source_url: The URL the summary was requested for.
        title: Display title of the subject.
        raw_text: The unparsed generated text.
        created_at: When the key was first stored. Never changes afterwards.
        accessed_at: Last read or write of the key.
    """

    created_at: datetime
    accessed_at: datetime

    @field_validator("created_at", "accessed_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        if isinstance(v, str):
            return from_iso(v)
        return v

    @field_serializer("created_at", "accessed_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return to_iso(value)


class SaveOutcome(BaseModel):
    """
    Result of a cache write.

    The default caller ignores it; stricter callers can tell a save that
    evicted older records, one that left the cache over capacity, or one
    that was dropped, from a plain save.
    """

    status: SaveStatus
    evicted: int = 0
    reason: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def saved(cls, evicted: int = 0) -> "SaveOutcome":
        if evicted > 0:
            return cls(status=SaveStatus.SAVED_WITH_EVICTIONS, evicted=evicted)
        return cls(status=SaveStatus.SAVED)

    @classmethod
    def over_capacity(cls, reason: str) -> "SaveOutcome":
        """The record was written but eviction failed, so the cache may exceed capacity."""
        return cls(status=SaveStatus.SAVED_OVER_CAPACITY, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "SaveOutcome":
        return cls(status=SaveStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status != SaveStatus.FAILED


class SummaryResult(BaseModel):
    """A summary ready for display, either freshly generated or read from cache."""

    subject_id: str
    title: str
    style: str
    points: list[SummaryPoint] = Field(default_factory=list)
    cached: bool = False
    save: Optional[SaveOutcome] = None


class RecentSummary(BaseModel):
    """A cached record with its raw text already parsed into points."""

    subject_id: str
    source_url: str
    title: str
    style: str
    points: list[SummaryPoint] = Field(default_factory=list)
    created_at: datetime
    accessed_at: datetime
