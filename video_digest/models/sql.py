from sqlalchemy import Column, Integer, String, Text, UniqueConstraint

from video_digest.core.constants import StorageConfig
from video_digest.core.db import Base


class SummaryModel(Base):
    """
    SQLAlchemy ORM model representing a cached video summary.

    Timestamps are stored as ISO-8601 UTC text with fixed microsecond
    precision, so ORDER BY on the column is chronological on every dialect.

    Attributes:
        id (int): Surrogate key (Auto-increment).
        subject_id (str): The YouTube video ID.
        source_url (str): The URL the summary was requested for.
        title (str): The title of the video.
        raw_text (str): The unparsed generated summary.
        style (str): Summary style; unique together with subject_id.
        created_at (str): When the (subject_id, style) pair was first saved.
        accessed_at (str): Last read or write of the record.
    """
    __tablename__ = StorageConfig.TABLE_NAME
    __table_args__ = (
        UniqueConstraint("subject_id", "style", name="uq_summaries_subject_style"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_id = Column(String, nullable=False)
    source_url = Column(String, nullable=False)
    title = Column(String, nullable=False)
    raw_text = Column(Text, nullable=False)
    style = Column(String, nullable=False)
    created_at = Column(String(40), nullable=False)
    accessed_at = Column(String(40), nullable=False, index=True)
