"""Query domain models: intent analysis, search options, responses."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from sift.content.models import ContentKind
from sift.vectors.models import RankedResult, SearchFilters


class Intent(StrEnum):
    """Primary intent of a query, in precedence order."""

    URGENCY = "urgency"
    TEMPORAL = "temporal"
    TREND = "trend"
    ANALYTICAL = "analytical"
    CONTENT_TYPE = "content_type"
    SEMANTIC = "semantic"


class TimeContext(StrEnum):
    """Time reference extracted from a query."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    RECENTLY = "recently"


class ResponseType(StrEnum):
    NO_RESULTS = "no_results"
    TEMPORAL = "temporal"
    TREND = "trend"
    URGENCY = "urgency"
    ANALYTICAL = "analytical"
    SEMANTIC = "semantic"


class IntentFlags(BaseModel):
    """Independent detector outcomes for one query."""

    temporal: bool = False
    analytical: bool = False
    urgency: bool = False
    content_type: bool = False
    trend: bool = False


class QueryAnalysis(BaseModel):
    """Everything the analyzer derives from a free-text query."""

    original_query: str
    primary_intent: Intent = Intent.SEMANTIC
    intents: IntentFlags = Field(default_factory=IntentFlags)
    time_context: TimeContext | None = None
    content_types: list[ContentKind] = Field(default_factory=list)
    is_question: bool = False
    needs_aggregation: bool = False
    needs_summary: bool = False


class SearchOptions(BaseModel):
    """Limit and filters handed to the vector store."""

    limit: int = 10
    filters: SearchFilters = Field(default_factory=SearchFilters)


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


class TopicCount(BaseModel):
    topic: str
    count: int


class SourceCount(BaseModel):
    source: str
    count: int


class ImportanceDistribution(BaseModel):
    """Results bucketed by importance: <2 low, <5 medium, else high."""

    low: int = 0
    medium: int = 0
    high: int = 0


class TemporalPatterns(BaseModel):
    """Results bucketed by age: ≤24h, ≤7d, older."""

    today: int = 0
    this_week: int = 0
    older: int = 0


class ResponseInsights(BaseModel):
    """Aggregations over a ranked result set.

    Each response template fills the subset relevant to its intent; the
    rest stay ``None``.
    """

    total_items: int | None = None
    average_importance: float | None = None
    high_importance: int | None = None
    urgent_items: int | None = None
    total_urgent: int | None = None
    total_trending: int | None = None
    needs_attention: bool | None = None
    timeframe: str | None = None
    trending_topics: list[TopicCount] | None = None
    top_keywords: list[str] | None = None
    content_breakdown: dict[str, int] | None = None
    importance_distribution: ImportanceDistribution | None = None
    temporal_patterns: TemporalPatterns | None = None
    top_sources: list[SourceCount] | None = None
    best_match_id: str | None = None
    average_relevance: float | None = None
    related_topics: list[str] | None = None
    recommendations: list[str] | None = None


class ComposedResponse(BaseModel):
    """An explained answer to a query."""

    type: ResponseType
    message: str
    items: list[RankedResult] = Field(default_factory=list)
    insights: ResponseInsights = Field(default_factory=ResponseInsights)
    suggestions: list[str] = Field(default_factory=list)
    enhanced: bool = False
    model: str | None = None


class QueryResult(BaseModel):
    """Full answer from ``ContentEngine.query``."""

    query: str
    analysis: QueryAnalysis
    search_options: SearchOptions
    results: list[RankedResult] = Field(default_factory=list)
    total_found: int = 0
    response: ComposedResponse
