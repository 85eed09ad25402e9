"""Tests for sift.vectors.store — cosine, documents, ranking, filters."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from sift.config import RankingConfig
from sift.content.fingerprint import create_item
from sift.content.models import (
    ContentItem,
    ContentKind,
    IngestRequest,
    ItemMetadata,
    UrgencyLevel,
)
from sift.errors import DimensionMismatch
from sift.vectors.models import DerivedMetadata, SearchFilters
from sift.vectors.store import VectorStore, build_document, cosine_similarity

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class _FixedProvider:
    """Provider whose output length can be changed between calls."""

    name = "fixed"

    def __init__(self, dimensions: int = 4) -> None:
        self.size = dimensions

    @property
    def dimensions(self) -> int:
        return self.size

    def embed(self, text: str) -> list[float]:
        return [1.0] + [0.0] * (self.size - 1)


def _make_item(
    content: str = "Buy milk",
    kind: ContentKind = ContentKind.TEXT,
    at: datetime = NOW,
    **updates: object,
) -> ContentItem:
    item = create_item(IngestRequest(type=kind, content=content, timestamp=at), now=NOW)
    return item.model_copy(update=updates) if updates else item


class TestCosineSimilarity:
    def test_self_similarity(self):
        assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)

    def test_orthogonal(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(DimensionMismatch):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


class TestBuildDocument:
    def test_sections_in_order(self):
        item = _make_item(
            "vector search notes",
            metadata=ItemMetadata(title="Title", description="Desc"),
            contextual_tags=["worth a look"],
        )
        document = build_document(item)
        sections = document.split("\n\n")
        assert sections[0] == "vector search notes"
        assert sections[1] == "Title"
        assert sections[2] == "Desc"
        assert sections[3].startswith("Keywords: ")
        assert "vector" in sections[3]
        assert sections[4] == "Context: worth a look"

    def test_extracted_content_included_when_different(self):
        item = _make_item("short", extracted_content="Longer extracted body")
        assert "Longer extracted body" in build_document(item)


class TestUpsert:
    def test_result(self):
        store = VectorStore()
        result = store.upsert(_make_item())
        assert result.success
        assert result.embedding_dimensions == 384
        assert result.text_length > 0

    def test_replaces_by_id(self):
        store = VectorStore()
        item = _make_item()
        store.upsert(item)
        store.upsert(item.model_copy(update={"importance_score": 6.0}))
        assert len(store) == 1
        record = store.get(item.id)
        assert record is not None
        assert record.metadata.importance_score == 6.0

    def test_dimension_change_rejected(self):
        provider = _FixedProvider(4)
        store = VectorStore(provider)
        store.upsert(_make_item("first"))
        provider.size = 8
        with pytest.raises(DimensionMismatch):
            store.upsert(_make_item("second"))
        assert len(store) == 1


class TestRemove:
    def test_remove_is_idempotent(self):
        store = VectorStore()
        item = _make_item()
        store.upsert(item)
        assert store.remove(item.id) is True
        assert store.remove(item.id) is False
        assert item.id not in store

    def test_empty_store_resets_dimensions(self):
        provider = _FixedProvider(4)
        store = VectorStore(provider)
        item = _make_item()
        store.upsert(item)
        store.remove(item.id)
        provider.size = 8
        assert store.upsert(_make_item("other")).embedding_dimensions == 8


class TestCompositeScore:
    def _metadata(self, **kwargs: object) -> DerivedMetadata:
        return DerivedMetadata.from_item(_make_item()).model_copy(update=kwargs)

    def test_weights_sum_to_one(self):
        r = RankingConfig()
        total = r.semantic_weight + r.importance_weight + r.urgency_weight + r.recency_weight
        assert total == pytest.approx(1.0)

    def test_rejects_bad_weights(self):
        with pytest.raises(ValueError):
            RankingConfig(semantic_weight=0.9)

    def test_urgency_monotonic(self):
        store = VectorStore()
        scores = [
            store.composite_score(0.5, self._metadata(urgency_level=level), NOW).composite
            for level in (UrgencyLevel.NORMAL, UrgencyLevel.MEDIUM, UrgencyLevel.HIGH)
        ]
        assert scores[0] < scores[1] < scores[2]

    def test_known_value(self):
        store = VectorStore()
        breakdown = store.composite_score(1.0, self._metadata(importance_score=10.0), NOW)
        # 0.4*1 + 0.3*1 + 0.2*0.5 + 0.1*1
        assert breakdown.composite == pytest.approx(0.9)

    def test_recency_floor(self):
        store = VectorStore()
        assert store.recency_multiplier(NOW - timedelta(days=365), NOW) == 0.1


class TestSearch:
    def test_exact_document_ranks_first(self):
        store = VectorStore()
        target = _make_item("quarterly budget review with finance team")
        store.upsert(target)
        store.upsert(_make_item("walk the dog in the park"))
        store.upsert(_make_item("learn rust ownership rules"))

        results = store.search(build_document(target), now=NOW)
        assert results.results[0].id == target.id
        assert results.results[0].scores.semantic == pytest.approx(1.0)
        assert results.total_found == 3

    def test_limit(self):
        store = VectorStore()
        for i in range(5):
            store.upsert(_make_item(f"note number {i} about things"))
        results = store.search("note", limit=2, now=NOW)
        assert len(results.results) == 2
        assert results.total_found == 5

    def test_sorted_descending(self):
        store = VectorStore()
        store.upsert(_make_item("alpha"))
        store.upsert(_make_item("beta", importance_score=9.0, urgency_level=UrgencyLevel.HIGH))
        results = store.search("gamma", now=NOW).results
        composites = [r.scores.composite for r in results]
        assert composites == sorted(composites, reverse=True)

    def test_urgency_filter(self):
        store = VectorStore()
        urgent = _make_item("call the bank", urgency_level=UrgencyLevel.HIGH)
        store.upsert(urgent)
        store.upsert(_make_item("read a novel"))
        results = store.search("bank", SearchFilters(urgency_level=UrgencyLevel.HIGH), now=NOW)
        assert [r.id for r in results.results] == [urgent.id]

    def test_type_filter(self):
        store = VectorStore()
        link = _make_item("https://example.com", kind=ContentKind.URL)
        store.upsert(link)
        store.upsert(_make_item("a plain note"))
        results = store.search("x", SearchFilters(content_type=ContentKind.URL), now=NOW)
        assert [r.id for r in results.results] == [link.id]

    def test_time_window_filter(self):
        store = VectorStore()
        fresh = _make_item("fresh note")
        store.upsert(fresh)
        store.upsert(_make_item("old note", at=NOW - timedelta(days=10)))
        results = store.search("note", SearchFilters(max_age_hours=24), now=NOW)
        assert [r.id for r in results.results] == [fresh.id]

    def test_importance_threshold(self):
        store = VectorStore()
        important = _make_item("big idea", importance_score=5.0)
        store.upsert(important)
        store.upsert(_make_item("small idea"))
        results = store.search("idea", SearchFilters(importance_threshold=2.0), now=NOW)
        assert [r.id for r in results.results] == [important.id]

    def test_empty_store(self):
        results = VectorStore().search("anything", now=NOW)
        assert results.results == []
        assert results.total_found == 0

    def test_relevance_reason(self):
        store = VectorStore()
        item = _make_item("pay rent", importance_score=8.0, urgency_level=UrgencyLevel.HIGH)
        store.upsert(item)
        reason = store.search(build_document(item), now=NOW).results[0].relevance_reason
        assert reason == "high semantic match, high importance, marked urgent"

    def test_search_does_not_mutate(self):
        store = VectorStore()
        item = _make_item()
        store.upsert(item)
        before = store.get(item.id)
        store.search("milk", now=NOW)
        assert store.get(item.id) is before


class TestStats:
    def test_stats(self):
        store = VectorStore()
        store.upsert(_make_item())
        stats = store.stats()
        assert stats.total_documents == 1
        assert stats.dimensions == 384
        assert stats.embedding_provider == "local-hash"
