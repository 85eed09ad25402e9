"""Vector store data types: records, filters, ranked results."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from sift.content.models import ContentItem, ContentKind, Trend, UrgencyLevel, Velocity


class DerivedMetadata(BaseModel):
    """Flattened, filterable projection of a ContentItem."""

    type: ContentKind
    timestamp: datetime
    last_submission: datetime
    importance_score: float = 1.0
    urgency_level: UrgencyLevel = UrgencyLevel.NORMAL
    submission_count: int = 1
    velocity: Velocity = Velocity.LOW
    trend: Trend = Trend.STABLE
    sources: dict[str, int] = Field(default_factory=dict)
    contextual_tags: list[str] = Field(default_factory=list)
    word_count: int = 0
    chunk_count: int = 1
    domain: str | None = None
    url: str | None = None
    file_name: str | None = None
    file_type: str | None = None

    @classmethod
    def from_item(cls, item: ContentItem) -> DerivedMetadata:
        meta = item.metadata
        return cls(
            type=item.type,
            timestamp=item.timestamp,
            last_submission=item.last_submission,
            importance_score=item.importance_score,
            urgency_level=item.urgency_level,
            submission_count=max(item.submission_count, 1),
            velocity=item.patterns.velocity,
            trend=item.patterns.trend,
            sources=dict(item.patterns.submission_sources),
            contextual_tags=list(item.contextual_tags),
            word_count=meta.word_count,
            chunk_count=meta.chunk_count,
            domain=(meta.url.domain or None) if meta.url else None,
            url=meta.url.url if meta.url else None,
            file_name=meta.file.file_name if meta.file else None,
            file_type=(meta.file.file_type or None) if meta.file else None,
        )


class EmbeddingRecord(BaseModel):
    """One vector store entry, 1:1 with a ContentItem id.

    Always re-derived from its item, never edited in place.
    """

    model_config = {"frozen": True}

    id: str
    embedding: list[float]
    document: str
    metadata: DerivedMetadata


class UpsertResult(BaseModel):
    """Outcome of indexing one item."""

    success: bool
    id: str
    embedding_dimensions: int = 0
    text_length: int = 0


class SearchFilters(BaseModel):
    """Filters applied before scoring.  Unset fields match everything."""

    importance_threshold: float = 0.0
    urgency_level: UrgencyLevel | None = None
    content_type: ContentKind | None = None
    max_age_hours: float | None = None


class ScoreBreakdown(BaseModel):
    """The four ranking factors and their weighted blend."""

    composite: float
    semantic: float
    importance: float
    urgency: float
    recency: float


class RankedResult(BaseModel):
    """One search hit with its scores and a short explanation."""

    id: str
    document: str
    metadata: DerivedMetadata
    scores: ScoreBreakdown
    distance: float
    relevance_reason: str


class SearchResults(BaseModel):
    """Ranked hits for one query."""

    query: str
    results: list[RankedResult] = Field(default_factory=list)
    total_found: int = 0


class StoreStats(BaseModel):
    """Size and configuration of a vector store."""

    total_documents: int
    dimensions: int | None
    embedding_provider: str
