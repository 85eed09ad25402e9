"""Content fingerprinting and submission merging.

The fingerprint is the dedup key: content whose normalised text matches
an existing item is merged into it as a new submission instead of being
stored twice.  The hash is a 32-bit rolling hash, deterministic but not
collision-free.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta

from sift import importance
from sift.config import ScoringConfig
from sift.content.models import ContentItem, IngestRequest, Submission, utcnow
from sift.content.text import (
    chunk_content,
    clean_content,
    extract_keywords,
    normalize_for_fingerprint,
    word_count,
)

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def fingerprint(text: str) -> str:
    """Return the dedup fingerprint of *text*.

    Case, punctuation, and whitespace differences do not change the
    result: ``fingerprint("Hello, World!") == fingerprint("hello world")``.
    Empty (or punctuation-only) text yields ``""``.
    """
    normalized = normalize_for_fingerprint(text)
    if not normalized:
        return ""

    h = 0
    for char in normalized:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def find_existing(items: Iterable[ContentItem], fp: str) -> ContentItem | None:
    """Linear lookup of the item carrying fingerprint *fp*."""
    if not fp:
        return None
    for item in items:
        if item.fingerprint == fp:
            return item
    return None


def _apply_assessment(
    item: ContentItem,
    submissions: list[Submission],
    now: datetime | None,
    config: ScoringConfig,
) -> ContentItem:
    """Return a copy of *item* rescored from the full *submissions* list."""
    ordered = sorted(submissions, key=lambda s: s.timestamp, reverse=True)
    assessment = importance.evaluate(ordered, now=now, config=config)
    return item.model_copy(
        update={
            "submissions": ordered,
            "timestamp": ordered[0].timestamp,
            "importance_score": assessment.score,
            "urgency_level": assessment.urgency.level,
            "urgency_reasons": assessment.urgency.reasons,
            "patterns": assessment.patterns,
            "contextual_tags": assessment.tags,
        }
    )


def merge_submission(
    existing: ContentItem,
    submission: Submission,
    now: datetime | None = None,
    config: ScoringConfig | None = None,
) -> ContentItem:
    """Merge a repeat submission into *existing*.

    The submission is appended, the history re-sorted newest first, the
    item timestamp moved to the newest submission, and importance,
    urgency, patterns and tags recomputed from the complete history.
    *existing* is left untouched; persistence is the caller's job.

    Submission timestamps stay unique so the history is strictly
    ordered: a submission colliding with an existing timestamp is moved
    forward by a microsecond.
    """
    taken = {sub.timestamp for sub in existing.submissions}
    timestamp = submission.timestamp
    while timestamp in taken:
        timestamp += timedelta(microseconds=1)
    if timestamp != submission.timestamp:
        submission = submission.model_copy(update={"timestamp": timestamp})

    submissions = [*existing.submissions, submission]
    merged = _apply_assessment(existing, submissions, now, config or ScoringConfig())
    logger.debug(
        "Merged submission into %s (fingerprint=%s, count=%d, score=%.2f)",
        merged.id,
        merged.fingerprint,
        merged.submission_count,
        merged.importance_score,
    )
    return merged


def submission_from_request(request: IngestRequest) -> Submission:
    return Submission(
        timestamp=request.timestamp or utcnow(),
        source=request.source or "unknown",
        type=request.type,
        metadata=dict(request.submission_metadata),
    )


def fingerprint_request(request: IngestRequest) -> str:
    """Fingerprint the text an ingestion request would be stored under."""
    return fingerprint(clean_content(request.extracted_content or request.content))


def create_item(
    request: IngestRequest,
    now: datetime | None = None,
    config: ScoringConfig | None = None,
) -> ContentItem:
    """Build a brand-new ContentItem with a single submission.

    URL and file items are normalised and fingerprinted from the text the
    extraction collaborator supplied; plain text items from their own
    content.
    """
    normalized = clean_content(request.extracted_content or request.content)
    metadata = request.metadata.model_copy(
        update={
            "word_count": request.metadata.word_count or word_count(normalized),
            "char_count": request.metadata.char_count or len(normalized),
            "chunk_count": len(chunk_content(normalized)),
        }
    )
    item = ContentItem(
        id=uuid.uuid4().hex,
        type=request.type,
        raw_content=request.content,
        normalized_content=normalized,
        extracted_content=request.extracted_content,
        fingerprint=fingerprint(normalized),
        keywords=extract_keywords(normalized),
        metadata=metadata,
    )
    return _apply_assessment(
        item, [submission_from_request(request)], now, config or ScoringConfig()
    )
