"""Rule-based query intent analysis.

Each detector is an independent keyword/phrase test over the lowercased
query.  The primary intent is then picked from an ordered list of
``(predicate, intent)`` pairs; the order is the precedence contract and
must not change: urgency > temporal > trend > analytical > content type
> semantic.

Urgency, analytical and trend keywords also match their inflected forms
("deadlines", "analyzed"), but only from the start of a word, so "know"
never reads as "now".  "urgent" and "trending" are not temporal keywords:
"show me trending topics" is a trend question, not a recency one.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from sift.config import QueryConfig
from sift.content.models import ContentKind, UrgencyLevel
from sift.query.models import (
    Intent,
    IntentFlags,
    QueryAnalysis,
    SearchOptions,
    TimeContext,
)

_DEFAULT_QUERY = QueryConfig()


# Keyword suffixes: exact word, plural, or any inflection ("deadlines", "analyzed")
_EXACT = ""
_PLURAL = "s?"
_INFLECTED = r"\w*"


def _keyword_pattern(keywords: Iterable[str], suffix: str = _EXACT) -> re.Pattern[str]:
    """Alternation over *keywords* (longest first) anchored at word boundaries."""
    ordered = sorted(keywords, key=len, reverse=True)
    body = "|".join(re.escape(k) for k in ordered)
    return re.compile(rf"\b(?:{body}){suffix}\b")


TEMPORAL_KEYWORDS = (
    "lately", "recently", "recent", "today", "yesterday", "this week",
    "last week", "this month", "last month", "current", "now",
)
ANALYTICAL_KEYWORDS = (
    "analyze", "analyse", "summary", "trends", "patterns", "insights",
    "overview", "breakdown", "statistics", "stats", "most", "least",
    "frequently", "often",
)
URGENCY_KEYWORDS = (
    "urgent", "important", "priority", "critical", "asap", "immediately",
    "deadline", "due", "reminder", "alert",
)
TREND_KEYWORDS = (
    "thinking about", "focused on", "working on", "interested in",
    "trending", "popular", "frequent", "repeated", "multiple times",
)
AGGREGATION_KEYWORDS = (
    "how many", "count", "total", "sum", "average", "most", "least",
    "all", "everything", "list", "show me",
)
SUMMARY_KEYWORDS = (
    "summary", "summarize", "summarise", "overview", "brief", "digest",
    "newsletter", "report", "update", "what happened", "catch up",
)
QUESTION_WORDS = ("what", "how", "when", "where", "why", "who", "which")

# Content type keyword families, in extraction order
CONTENT_TYPE_KEYWORDS: list[tuple[ContentKind, tuple[str, ...]]] = [
    (ContentKind.FILE, ("file", "document", "pdf", "image", "photo")),
    (ContentKind.URL, ("link", "website", "url", "article", "page")),
    (ContentKind.TEXT, ("note", "text", "thought", "idea", "memo")),
]

_TEMPORAL_RE = _keyword_pattern(TEMPORAL_KEYWORDS)
_ANALYTICAL_RE = _keyword_pattern(ANALYTICAL_KEYWORDS, _INFLECTED)
_URGENCY_RE = _keyword_pattern(URGENCY_KEYWORDS, _INFLECTED)
_TREND_RE = _keyword_pattern(TREND_KEYWORDS, _INFLECTED)
_AGGREGATION_RE = _keyword_pattern(AGGREGATION_KEYWORDS)
_SUMMARY_RE = _keyword_pattern(SUMMARY_KEYWORDS)
_QUESTION_RE = re.compile(r"(?:" + "|".join(QUESTION_WORDS) + r")\b")
_CONTENT_TYPE_RES: list[tuple[ContentKind, re.Pattern[str]]] = [
    (kind, _keyword_pattern(words, _PLURAL)) for kind, words in CONTENT_TYPE_KEYWORDS
]

# First match wins
TIME_PATTERNS: list[tuple[TimeContext, re.Pattern[str]]] = [
    (TimeContext.TODAY, re.compile(r"\b(?:today|this day)\b")),
    (TimeContext.YESTERDAY, re.compile(r"\byesterday\b")),
    (TimeContext.THIS_WEEK, re.compile(r"\b(?:this|past) week\b")),
    (TimeContext.LAST_WEEK, re.compile(r"\blast week\b")),
    (TimeContext.THIS_MONTH, re.compile(r"\b(?:this|past) month\b")),
    (TimeContext.RECENTLY, re.compile(r"\b(?:recently|lately|recent)\b")),
]

INTENT_PRECEDENCE: list[tuple[Callable[[IntentFlags], bool], Intent]] = [
    (lambda f: f.urgency, Intent.URGENCY),
    (lambda f: f.temporal, Intent.TEMPORAL),
    (lambda f: f.trend, Intent.TREND),
    (lambda f: f.analytical, Intent.ANALYTICAL),
    (lambda f: f.content_type, Intent.CONTENT_TYPE),
]

# Search window in hours per time context
TIME_WINDOWS: dict[TimeContext, float] = {
    TimeContext.TODAY: 24.0,
    TimeContext.YESTERDAY: 48.0,
    TimeContext.THIS_WEEK: 168.0,
    TimeContext.RECENTLY: 168.0,
    TimeContext.LAST_WEEK: 336.0,
    TimeContext.THIS_MONTH: 720.0,
}


def extract_time_context(query: str) -> TimeContext | None:
    lowered = query.lower()
    for context, pattern in TIME_PATTERNS:
        if pattern.search(lowered):
            return context
    return None


def extract_content_types(query: str) -> list[ContentKind]:
    lowered = query.lower()
    return [kind for kind, pattern in _CONTENT_TYPE_RES if pattern.search(lowered)]


def detect_intents(query: str) -> IntentFlags:
    lowered = query.lower()
    return IntentFlags(
        temporal=bool(_TEMPORAL_RE.search(lowered)),
        analytical=bool(_ANALYTICAL_RE.search(lowered)),
        urgency=bool(_URGENCY_RE.search(lowered)),
        content_type=any(p.search(lowered) for _kind, p in _CONTENT_TYPE_RES),
        trend=bool(_TREND_RE.search(lowered)),
    )


def primary_intent(flags: IntentFlags) -> Intent:
    for predicate, intent in INTENT_PRECEDENCE:
        if predicate(flags):
            return intent
    return Intent.SEMANTIC


def _is_question(lowered: str) -> bool:
    return "?" in lowered or bool(_QUESTION_RE.match(lowered))


def analyze_query(query: str) -> QueryAnalysis:
    """Classify a free-text query.

    Args:
        query: The user's question.

    Returns:
        Detector flags, primary intent, time context, content types, and
        the aggregation/summary hints used to size the search.
    """
    lowered = query.lower().strip()
    flags = detect_intents(lowered)
    return QueryAnalysis(
        original_query=query,
        primary_intent=primary_intent(flags),
        intents=flags,
        time_context=extract_time_context(lowered),
        content_types=extract_content_types(lowered),
        is_question=_is_question(lowered),
        needs_aggregation=bool(_AGGREGATION_RE.search(lowered)),
        needs_summary=bool(_SUMMARY_RE.search(lowered)),
    )


def build_search_options(
    analysis: QueryAnalysis,
    base: SearchOptions | None = None,
    config: QueryConfig = _DEFAULT_QUERY,
) -> SearchOptions:
    """Derive the vector store limit and filters from an analysis.

    Filters already set on *base* are kept unless the analysis implies a
    different one.
    """
    base = base or SearchOptions(limit=config.default_limit)
    limit = base.limit
    filters = base.filters.model_copy()

    if analysis.needs_aggregation:
        limit = max(limit, config.aggregation_limit)

    if analysis.intents.trend or analysis.primary_intent == Intent.TREND:
        filters.importance_threshold = config.trend_importance_threshold

    if analysis.intents.urgency:
        filters.urgency_level = UrgencyLevel.HIGH

    if len(analysis.content_types) == 1:
        filters.content_type = analysis.content_types[0]

    if analysis.time_context is not None:
        filters.max_age_hours = TIME_WINDOWS[analysis.time_context]

    return SearchOptions(limit=limit, filters=filters)
