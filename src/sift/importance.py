"""Scoring of submission histories.

Every function here is a pure function of a submissions list (and the
evaluation time ``now``).  Nothing is updated incrementally: callers
recompute the full assessment whenever the list changes.

Submissions are expected newest first, which is how ContentItem stores
them.  Timestamps must be timezone-aware.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable, Sequence
from datetime import datetime

from pydantic import BaseModel, Field

from sift.config import ScoringConfig
from sift.content.models import (
    Submission,
    SubmissionPatterns,
    TimeSpan,
    Trend,
    UrgencyLevel,
    Velocity,
    utcnow,
)

_DEFAULT_SCORING = ScoringConfig()

_SECONDS_PER_HOUR = 3600.0


class UrgencyAssessment(BaseModel):
    """Urgency level plus the cause codes that produced it."""

    level: UrgencyLevel = UrgencyLevel.NORMAL
    reasons: list[str] = Field(default_factory=list)

    @property
    def should_prioritize(self) -> bool:
        return self.level != UrgencyLevel.NORMAL


class ImportanceAssessment(BaseModel):
    """Everything the engine derives from a submission history."""

    score: float
    patterns: SubmissionPatterns
    urgency: UrgencyAssessment
    tags: list[str] = Field(default_factory=list)


def _hours_ago(timestamp: datetime, now: datetime) -> float:
    return (now - timestamp).total_seconds() / _SECONDS_PER_HOUR


def frequency_multiplier(count: int, config: ScoringConfig = _DEFAULT_SCORING) -> float:
    """Piecewise multiplier keyed to the number of submissions."""
    if count <= 1:
        return config.single_multiplier
    if count == 2:
        return config.double_multiplier
    if count == 3:
        return config.triple_multiplier
    if count <= 5:
        return config.mid_offset + count * config.mid_per_submission
    return config.high_offset + math.log(count - 4) * config.high_log_weight


def velocity_bonus(
    submissions: Sequence[Submission],
    now: datetime | None = None,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> float:
    """Bonus for several submissions inside the velocity window."""
    now = now or utcnow()
    recent = sum(
        1
        for sub in submissions
        if _hours_ago(sub.timestamp, now) <= config.velocity_window_hours
    )
    if recent < 2:
        return 0.0
    return min((recent - 1) * config.velocity_step, config.velocity_cap)


def recency_boost(
    submissions: Sequence[Submission],
    now: datetime | None = None,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> float:
    """Boost based on the age of the newest submission (needs ≥2 submissions)."""
    if len(submissions) < 2:
        return 0.0
    now = now or utcnow()
    newest = max(sub.timestamp for sub in submissions)
    age = _hours_ago(newest, now)
    for max_age, boost in config.recency_boosts:
        if age <= max_age:
            return boost
    return 0.0


def score(
    submissions: Sequence[Submission],
    now: datetime | None = None,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> float:
    """Compute the bounded importance score for a submission history.

    Each submission contributes ``base * 0.5 ** (hours_ago / half_life)``;
    the sum is scaled by the frequency multiplier, then the velocity
    bonus and recency boost are added and the total clamped to
    ``[base_importance, max_importance]``.

    Args:
        submissions: Submission history (any order).
        now: Evaluation time, defaults to the current UTC time.
        config: Scoring constants.

    Returns:
        Importance score in ``[1.0, 10.0]`` with default constants.
    """
    if not submissions:
        return config.base_importance

    now = now or utcnow()

    total = 0.0
    for sub in submissions:
        # Future timestamps (clock skew) count as "just now"
        hours = max(_hours_ago(sub.timestamp, now), 0.0)
        total += config.base_importance * 0.5 ** (hours / config.decay_half_life_hours)

    total *= frequency_multiplier(len(submissions), config)
    total += velocity_bonus(submissions, now, config)
    total += recency_boost(submissions, now, config)

    return max(config.base_importance, min(total, config.max_importance))


def _average_interval(submissions: Sequence[Submission]) -> float | None:
    """Mean hours between consecutive newest-first submissions."""
    if len(submissions) < 2:
        return None
    intervals = [
        _hours_ago(older.timestamp, newer.timestamp)
        for newer, older in zip(submissions, submissions[1:])
    ]
    return sum(intervals) / len(intervals)


def _time_span(submissions: Sequence[Submission]) -> TimeSpan:
    if not submissions:
        return TimeSpan()
    timestamps = [sub.timestamp for sub in submissions]
    earliest = min(timestamps)
    latest = max(timestamps)
    hours = (latest - earliest).total_seconds() / _SECONDS_PER_HOUR
    return TimeSpan(
        hours=round(hours, 2),
        days=round(hours / 24, 2),
        earliest=earliest,
        latest=latest,
    )


def analyze_patterns(
    submissions: Sequence[Submission],
    now: datetime | None = None,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> SubmissionPatterns:
    """Summarise velocity, trend, sources, and time span of a history."""
    if not submissions:
        return SubmissionPatterns()

    now = now or utcnow()
    ordered = sorted(submissions, key=lambda s: s.timestamp, reverse=True)

    ages = [_hours_ago(sub.timestamp, now) for sub in ordered]
    last_24h = sum(1 for age in ages if age <= 24)
    last_7d = sum(1 for age in ages if age <= 24 * 7)

    if last_24h >= 3:
        velocity = Velocity.HIGH
    elif last_24h >= 2 or last_7d >= 5:
        velocity = Velocity.MEDIUM
    else:
        velocity = Velocity.LOW

    midpoint = len(ordered) // 2
    newer_interval = _average_interval(ordered[:midpoint])
    older_interval = _average_interval(ordered[midpoint:])

    trend = Trend.STABLE
    if newer_interval is not None and older_interval is not None:
        if newer_interval < older_interval * config.trend_increasing_ratio:
            trend = Trend.INCREASING
        elif newer_interval > older_interval * config.trend_decreasing_ratio:
            trend = Trend.DECREASING

    sources = Counter(sub.source or "unknown" for sub in ordered)

    return SubmissionPatterns(
        velocity=velocity,
        trend=trend,
        submission_sources=dict(sources),
        total_submissions=len(ordered),
        time_span=_time_span(ordered),
    )


def assess_urgency(
    importance: float,
    patterns: SubmissionPatterns,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> UrgencyAssessment:
    """Classify urgency from the score, promoted one step by high velocity."""
    level = UrgencyLevel.NORMAL
    reasons: list[str] = []

    if importance >= config.high_urgency_score:
        level = UrgencyLevel.HIGH
        reasons.append("high_importance_score")
    elif importance >= config.medium_urgency_score:
        level = UrgencyLevel.MEDIUM
        reasons.append("elevated_importance")

    if patterns.velocity == Velocity.HIGH:
        level = UrgencyLevel.MEDIUM if level == UrgencyLevel.NORMAL else UrgencyLevel.HIGH
        reasons.append("high_submission_velocity")

    if patterns.trend == Trend.INCREASING:
        reasons.append("increasing_attention")

    return UrgencyAssessment(level=level, reasons=reasons)


# Ordered (predicate, label) rules; the first ``max_contextual_tags`` matches win.
TagRule = tuple[Callable[[SubmissionPatterns, float], bool], str]

TAG_RULES: list[TagRule] = [
    (lambda p, s: s >= 7.0, "high priority"),
    (lambda p, s: p.velocity == Velocity.HIGH, "trending now"),
    (lambda p, s: p.total_submissions >= 5, "keeps coming back"),
    (lambda p, s: len(p.submission_sources) >= 3, "researched thoroughly"),
    (lambda p, s: p.trend == Trend.INCREASING, "growing interest"),
    (lambda p, s: p.trend == Trend.DECREASING, "fading interest"),
    (lambda p, s: p.total_submissions >= 2 and p.time_span.hours <= 1, "rapid fire"),
    (lambda p, s: p.total_submissions >= 2 and p.time_span.days >= 7, "long-running interest"),
    (lambda p, s: s >= 4.0, "worth a look"),
]


def contextual_tags(
    patterns: SubmissionPatterns,
    importance: float,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> list[str]:
    """Human-readable labels for the submission pattern."""
    tags: list[str] = []
    for predicate, label in TAG_RULES:
        if len(tags) >= config.max_contextual_tags:
            break
        if predicate(patterns, importance):
            tags.append(label)
    return tags


def evaluate(
    submissions: Sequence[Submission],
    now: datetime | None = None,
    config: ScoringConfig = _DEFAULT_SCORING,
) -> ImportanceAssessment:
    """Run the full importance pipeline over one submission history."""
    now = now or utcnow()
    importance = score(submissions, now, config)
    patterns = analyze_patterns(submissions, now, config)
    return ImportanceAssessment(
        score=importance,
        patterns=patterns,
        urgency=assess_urgency(importance, patterns, config),
        tags=contextual_tags(patterns, importance, config),
    )
