"""In-memory vector store with composite ranking.

Holds one EmbeddingRecord per content item and ranks them for a query by
blending semantic similarity with importance, urgency, and recency.

Internal state:
- ``_records``: item id -> EmbeddingRecord, guarded by ``_lock``
- ``_dimensions``: vector length fixed by the first record

Records are replaced whole under the lock, so a search never sees a
half-written record.  Embedding happens outside the lock.  Search is a
linear scan over a snapshot and never mutates the store.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Sequence
from datetime import datetime

from sift.config import RankingConfig
from sift.content.models import ContentItem, UrgencyLevel, Velocity, utcnow
from sift.errors import DimensionMismatch
from sift.vectors.embeddings import EmbeddingProvider, HashEmbeddingProvider
from sift.vectors.models import (
    DerivedMetadata,
    EmbeddingRecord,
    RankedResult,
    ScoreBreakdown,
    SearchFilters,
    SearchResults,
    StoreStats,
    UpsertResult,
)

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def build_document(item: ContentItem) -> str:
    """Assemble the text that represents *item* in the vector store.

    Sections, in priority order: normalised content, extracted content,
    title, description, keywords, contextual tags.
    """
    parts: list[str] = []
    primary = item.normalized_content or item.raw_content
    if primary:
        parts.append(primary)
    if item.extracted_content and item.extracted_content.strip() != primary:
        parts.append(item.extracted_content.strip())
    if item.metadata.title:
        parts.append(item.metadata.title)
    if item.metadata.description:
        parts.append(item.metadata.description)
    if item.keywords:
        parts.append("Keywords: " + " ".join(k.word for k in item.keywords))
    if item.contextual_tags:
        parts.append("Context: " + " ".join(item.contextual_tags))
    return "\n\n".join(parts).strip()


def explain_relevance(metadata: DerivedMetadata, semantic: float) -> str:
    """Short human-readable reason a record matched."""
    reasons: list[str] = []
    if semantic > 0.8:
        reasons.append("high semantic match")
    if metadata.importance_score > 5:
        reasons.append("high importance")
    if metadata.urgency_level == UrgencyLevel.HIGH:
        reasons.append("marked urgent")
    if metadata.submission_count > 2:
        reasons.append("multiple submissions")
    if metadata.velocity == Velocity.HIGH:
        reasons.append("trending topic")
    return ", ".join(reasons) if reasons else "semantic similarity"


class VectorStore:
    """Keyed, thread-safe store of embedding records."""

    def __init__(
        self,
        provider: EmbeddingProvider | None = None,
        ranking: RankingConfig | None = None,
    ) -> None:
        self._provider = provider or HashEmbeddingProvider()
        self._ranking = ranking or RankingConfig()
        self._records: dict[str, EmbeddingRecord] = {}
        self._dimensions: int | None = None
        self._lock = threading.RLock()

    # -- Write operations ----------------------------------------------------

    def upsert(self, item: ContentItem) -> UpsertResult:
        """Embed *item* and replace any previous record for its id.

        Raises:
            DimensionMismatch: If the embedding length differs from the
                vectors already in the store.
        """
        document = build_document(item)
        embedding = self._provider.embed(document)
        record = EmbeddingRecord(
            id=item.id,
            embedding=embedding,
            document=document,
            metadata=DerivedMetadata.from_item(item),
        )

        with self._lock:
            if self._dimensions is None:
                self._dimensions = len(embedding)
            elif len(embedding) != self._dimensions:
                raise DimensionMismatch(self._dimensions, len(embedding))
            self._records[item.id] = record

        logger.debug(
            "Indexed %s (importance=%.2f, dims=%d)",
            item.id,
            item.importance_score,
            len(embedding),
        )
        return UpsertResult(
            success=True,
            id=item.id,
            embedding_dimensions=len(embedding),
            text_length=len(document),
        )

    def remove(self, item_id: str) -> bool:
        """Delete the record for *item_id*.  Absent ids are a no-op."""
        with self._lock:
            removed = self._records.pop(item_id, None) is not None
            if not self._records:
                self._dimensions = None
        return removed

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._dimensions = None

    # -- Read operations -----------------------------------------------------

    def get(self, item_id: str) -> EmbeddingRecord | None:
        with self._lock:
            return self._records.get(item_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._records

    def stats(self) -> StoreStats:
        with self._lock:
            return StoreStats(
                total_documents=len(self._records),
                dimensions=self._dimensions,
                embedding_provider=self._provider.name,
            )

    # -- Ranking -------------------------------------------------------------

    def urgency_multiplier(self, level: UrgencyLevel | None) -> float:
        multipliers = self._ranking.urgency_multipliers
        if level is None:
            return multipliers.get("normal", 0.5)
        return multipliers.get(level.value, multipliers.get("normal", 0.5))

    def recency_multiplier(self, last_submission: datetime, now: datetime | None = None) -> float:
        now = now or utcnow()
        hours = max((now - last_submission).total_seconds() / _SECONDS_PER_HOUR, 0.0)
        return max(
            self._ranking.recency_floor,
            math.exp(-hours / self._ranking.recency_half_life_hours),
        )

    def composite_score(
        self,
        semantic: float,
        metadata: DerivedMetadata,
        now: datetime | None = None,
    ) -> ScoreBreakdown:
        """Blend the four ranking factors for one record."""
        r = self._ranking
        importance = metadata.importance_score / 10
        urgency = self.urgency_multiplier(metadata.urgency_level)
        recency = self.recency_multiplier(metadata.last_submission, now)
        composite = (
            r.semantic_weight * semantic
            + r.importance_weight * importance
            + r.urgency_weight * urgency
            + r.recency_weight * recency
        )
        return ScoreBreakdown(
            composite=composite,
            semantic=semantic,
            importance=metadata.importance_score,
            urgency=urgency,
            recency=recency,
        )

    @staticmethod
    def _passes(metadata: DerivedMetadata, filters: SearchFilters, now: datetime) -> bool:
        if filters.importance_threshold > 0 and metadata.importance_score < filters.importance_threshold:
            return False
        if filters.urgency_level is not None and metadata.urgency_level != filters.urgency_level:
            return False
        if filters.content_type is not None and metadata.type != filters.content_type:
            return False
        if filters.max_age_hours is not None:
            age = (now - metadata.timestamp).total_seconds() / _SECONDS_PER_HOUR
            if age > filters.max_age_hours:
                return False
        return True

    def search(
        self,
        query: str,
        filters: SearchFilters | None = None,
        limit: int = 10,
        now: datetime | None = None,
    ) -> SearchResults:
        """Rank stored records against *query*.

        Args:
            query: Free-text query, embedded with the store's provider.
            filters: Pre-scoring filters; ``None`` matches everything.
            limit: Maximum number of results returned.
            now: Evaluation time for time filters and recency.

        Returns:
            Results sorted by descending composite score, plus the number
            of records that passed the filters.

        Raises:
            DimensionMismatch: If the query embedding length differs from
                the stored vectors.
        """
        filters = filters or SearchFilters()
        now = now or utcnow()
        query_embedding = self._provider.embed(query)

        with self._lock:
            snapshot = list(self._records.values())

        results: list[RankedResult] = []
        for record in snapshot:
            if not self._passes(record.metadata, filters, now):
                continue
            semantic = cosine_similarity(query_embedding, record.embedding)
            results.append(
                RankedResult(
                    id=record.id,
                    document=record.document,
                    metadata=record.metadata,
                    scores=self.composite_score(semantic, record.metadata, now),
                    distance=1 - semantic,
                    relevance_reason=explain_relevance(record.metadata, semantic),
                )
            )

        results.sort(key=lambda r: r.scores.composite, reverse=True)
        return SearchResults(
            query=query,
            results=results[: max(limit, 0)],
            total_found=len(results),
        )
