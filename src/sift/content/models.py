"""Content domain models — pure Pydantic v2 data types.

A ContentItem is one logical piece of captured content.  Every time the
same (normalised) content is submitted again it gains a Submission
instead of becoming a new item; its importance, urgency, and tags are
recomputed from the full submission history.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import AwareDatetime, BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(tz=UTC)


class ContentKind(StrEnum):
    """Kind of captured content."""

    TEXT = "text"
    URL = "url"
    FILE = "file"


class UrgencyLevel(StrEnum):
    """Urgency classification derived from importance and velocity."""

    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"


class Velocity(StrEnum):
    """Rate of recent resubmission."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Trend(StrEnum):
    """Direction of change in submission interval."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


# ---------------------------------------------------------------------------
# Producer metadata
# ---------------------------------------------------------------------------


class UrlMetadata(BaseModel):
    """Attributes supplied by the URL extraction collaborator."""

    url: str
    domain: str = ""
    site_name: str = ""
    author: str = ""


class FileMetadata(BaseModel):
    """Attributes supplied by the file extraction collaborator."""

    file_name: str
    file_type: str = ""
    size_bytes: int = 0
    pages: int | None = None


class ImageMetadata(BaseModel):
    """Attributes supplied by the image analysis collaborator."""

    dimensions: str = ""
    format: str = ""
    ocr_text: str = ""
    has_text: bool = False


class ItemMetadata(BaseModel):
    """Schema'd metadata for a content item.

    Common fields are always present; producer-specific blocks are
    set only by the collaborator that knows about them.
    """

    title: str = ""
    description: str = ""
    word_count: int = 0
    char_count: int = 0
    chunk_count: int = 1
    url: UrlMetadata | None = None
    file: FileMetadata | None = None
    image: ImageMetadata | None = None


# ---------------------------------------------------------------------------
# Submission history
# ---------------------------------------------------------------------------


class Submission(BaseModel):
    """One timestamped occurrence of a fingerprint being ingested."""

    timestamp: AwareDatetime = Field(default_factory=utcnow)
    source: str = "unknown"
    type: ContentKind = ContentKind.TEXT
    metadata: dict[str, str | int | float | bool] = Field(default_factory=dict)


class TimeSpan(BaseModel):
    """Span between the earliest and latest submission."""

    hours: float = 0.0
    days: float = 0.0
    earliest: datetime | None = None
    latest: datetime | None = None


class SubmissionPatterns(BaseModel):
    """Aggregate view of a submission history."""

    velocity: Velocity = Velocity.NONE
    trend: Trend = Trend.STABLE
    submission_sources: dict[str, int] = Field(default_factory=dict)
    total_submissions: int = 0
    time_span: TimeSpan = Field(default_factory=TimeSpan)


class Keyword(BaseModel):
    """A frequent content word."""

    word: str
    count: int


# ---------------------------------------------------------------------------
# Core content model
# ---------------------------------------------------------------------------


class ContentItem(BaseModel):
    """One logical piece of captured content.

    ``importance_score``, ``urgency_level``, ``urgency_reasons``,
    ``patterns`` and ``contextual_tags`` are always a pure function of
    ``submissions``; they are recomputed in full on every merge.
    """

    id: str
    type: ContentKind
    raw_content: str
    normalized_content: str = ""
    extracted_content: str = ""
    fingerprint: str
    keywords: list[Keyword] = Field(default_factory=list)
    submissions: list[Submission] = Field(default_factory=list)
    timestamp: AwareDatetime = Field(default_factory=utcnow)
    importance_score: float = 1.0
    urgency_level: UrgencyLevel = UrgencyLevel.NORMAL
    urgency_reasons: list[str] = Field(default_factory=list)
    patterns: SubmissionPatterns = Field(default_factory=SubmissionPatterns)
    contextual_tags: list[str] = Field(default_factory=list)
    metadata: ItemMetadata = Field(default_factory=ItemMetadata)

    @property
    def submission_count(self) -> int:
        return len(self.submissions)

    @property
    def last_submission(self) -> datetime:
        """Timestamp of the newest submission (or the item timestamp)."""
        if self.submissions:
            return self.submissions[0].timestamp
        return self.timestamp


class IngestRequest(BaseModel):
    """Ingestion input from the content-processing collaborator.

    ``content`` is the raw text, URL, or file reference.  For URLs and
    files the collaborator passes the text it extracted in
    ``extracted_content``; the engine never fetches or parses anything.
    """

    type: ContentKind
    content: str
    source: str = "unknown"
    extracted_content: str = ""
    metadata: ItemMetadata = Field(default_factory=ItemMetadata)
    submission_metadata: dict[str, str | int | float | bool] = Field(default_factory=dict)
    timestamp: AwareDatetime | None = None
