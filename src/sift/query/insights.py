"""Aggregations over ranked results, used to fill ResponseInsights."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime

from sift.content.models import ContentKind, UrgencyLevel, utcnow
from sift.query.models import (
    ImportanceDistribution,
    SourceCount,
    TemporalPatterns,
    TopicCount,
)
from sift.vectors.models import RankedResult

_SECONDS_PER_HOUR = 3600.0


def trending_topics(results: Sequence[RankedResult], limit: int = 5) -> list[TopicCount]:
    """Most frequent contextual tags across *results*."""
    counts: Counter[str] = Counter()
    for result in results:
        counts.update(result.metadata.contextual_tags)
    return [TopicCount(topic=tag, count=n) for tag, n in counts.most_common(limit)]


def average_importance(results: Sequence[RankedResult]) -> float:
    if not results:
        return 0.0
    total = sum(r.metadata.importance_score for r in results)
    return round(total / len(results), 2)


def average_relevance(results: Sequence[RankedResult]) -> float:
    if not results:
        return 0.0
    total = sum(r.scores.semantic for r in results)
    return round(total / len(results), 2)


def count_high_importance(results: Sequence[RankedResult], threshold: float = 3.0) -> int:
    return sum(1 for r in results if r.metadata.importance_score > threshold)


def count_urgent(results: Sequence[RankedResult]) -> int:
    return sum(1 for r in results if r.metadata.urgency_level == UrgencyLevel.HIGH)


def content_breakdown(results: Sequence[RankedResult]) -> dict[str, int]:
    """Result counts per content type; every type is present."""
    breakdown = {kind.value: 0 for kind in ContentKind}
    for result in results:
        breakdown[result.metadata.type.value] += 1
    return breakdown


def importance_distribution(results: Sequence[RankedResult]) -> ImportanceDistribution:
    dist = ImportanceDistribution()
    for result in results:
        score = result.metadata.importance_score
        if score < 2:
            dist.low += 1
        elif score < 5:
            dist.medium += 1
        else:
            dist.high += 1
    return dist


def temporal_patterns(
    results: Sequence[RankedResult],
    now: datetime | None = None,
) -> TemporalPatterns:
    """Bucket results by age of their newest submission."""
    now = now or utcnow()
    patterns = TemporalPatterns()
    for result in results:
        hours = (now - result.metadata.timestamp).total_seconds() / _SECONDS_PER_HOUR
        if hours <= 24:
            patterns.today += 1
        elif hours <= 168:
            patterns.this_week += 1
        else:
            patterns.older += 1
    return patterns


def top_sources(results: Sequence[RankedResult], limit: int = 3) -> list[SourceCount]:
    """Submission sources summed across results, most frequent first."""
    counts: Counter[str] = Counter()
    for result in results:
        counts.update(result.metadata.sources)
    return [SourceCount(source=s, count=n) for s, n in counts.most_common(limit)]


def related_topics(results: Sequence[RankedResult], top: int = 3, limit: int = 5) -> list[str]:
    """Distinct contextual tags of the *top* results, first-seen order."""
    topics: list[str] = []
    for result in results[:top]:
        for tag in result.metadata.contextual_tags:
            if tag not in topics:
                topics.append(tag)
    return topics[:limit]


def top_keywords(results: Sequence[RankedResult], limit: int = 10) -> list[str]:
    """Keywords from the ``Keywords:`` section of each result document."""
    counts: Counter[str] = Counter()
    for result in results:
        for section in result.document.split("\n\n"):
            if section.startswith("Keywords: "):
                counts.update(section.removeprefix("Keywords: ").split())
    return [word for word, _n in counts.most_common(limit)]
