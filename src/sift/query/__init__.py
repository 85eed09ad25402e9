"""Query domain — intent analysis, search options, response composition."""

from sift.query.analyzer import analyze_query, build_search_options
from sift.query.composer import (
    LLMEnrichedComposer,
    ResponseComposer,
    TemplateComposer,
    compose_response,
)
from sift.query.models import (
    ComposedResponse,
    Intent,
    IntentFlags,
    QueryAnalysis,
    QueryResult,
    ResponseInsights,
    ResponseType,
    SearchOptions,
    TimeContext,
)

__all__ = [
    "ComposedResponse",
    "Intent",
    "IntentFlags",
    "LLMEnrichedComposer",
    "QueryAnalysis",
    "QueryResult",
    "ResponseComposer",
    "ResponseInsights",
    "ResponseType",
    "SearchOptions",
    "TemplateComposer",
    "TimeContext",
    "analyze_query",
    "build_search_options",
    "compose_response",
]
