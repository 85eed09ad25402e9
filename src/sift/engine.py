"""Content engine facade.

Wires the pieces into the two flows the rest of the world uses:

    ingest:  request -> fingerprint -> merge or create -> persist -> index
    query:   text -> intent analysis -> ranked search -> composed response

The engine owns its VectorStore and talks to persistence only through a
``ContentRepository``.  Mutations are serialised per fingerprint: two
concurrent submissions of the same content always end up as one item
with two submissions, while unrelated content ingests in parallel.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from sift.config import SiftConfig
from sift.content.fingerprint import (
    create_item,
    find_existing,
    fingerprint_request,
    merge_submission,
    submission_from_request,
)
from sift.content.models import ContentItem, IngestRequest
from sift.content.store import (
    ContentRepository,
    InMemoryContentRepository,
    JsonContentRepository,
)
from sift.errors import MalformedInput
from sift.query.analyzer import analyze_query, build_search_options
from sift.query.composer import LLMEnrichedComposer, ResponseComposer, TemplateComposer
from sift.query.models import QueryResult, SearchOptions
from sift.vectors.embeddings import create_embedding_provider
from sift.vectors.models import StoreStats, UpsertResult
from sift.vectors.store import VectorStore

logger = logging.getLogger(__name__)


class IngestResult(BaseModel):
    """Outcome of one ingestion."""

    item: ContentItem
    is_duplicate: bool
    index: UpsertResult


class DeleteResult(BaseModel):
    deleted: bool
    notice: str = ""


class EngineStats(BaseModel):
    total_items: int
    vector_store: StoreStats


class ContentEngine:
    """Ingest content, keep it ranked, answer questions about it.

    Args:
        repository: Persistence collaborator.  Defaults to in-memory.
        vector_store: Vector index.  Defaults to a store using the
            embedding provider described by *config*.
        config: Engine configuration.  Defaults to ``SiftConfig()``.
        composer: Response composer.  Defaults to the template composer.
    """

    def __init__(
        self,
        repository: ContentRepository | None = None,
        vector_store: VectorStore | None = None,
        config: SiftConfig | None = None,
        composer: ResponseComposer | None = None,
    ) -> None:
        self._config = config or SiftConfig()
        self._repository = repository or InMemoryContentRepository()
        self._vectors = vector_store or VectorStore(
            create_embedding_provider(self._config.embedding),
            self._config.ranking,
        )
        self._composer = composer or TemplateComposer()
        # Entries vanish once no ingest or delete holds the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config: SiftConfig) -> ContentEngine:
        """Build an engine with JSON persistence and the configured providers."""
        composer: ResponseComposer = TemplateComposer()
        if config.llm.enabled:
            composer = LLMEnrichedComposer(
                TemplateComposer(),
                model=config.llm.model,
                timeout=config.llm.timeout,
            )
        engine = cls(
            repository=JsonContentRepository(Path(config.storage.directory)),
            config=config,
            composer=composer,
        )
        restored = engine.rebuild()
        logger.info("Engine ready with %d item(s)", restored)
        return engine

    @property
    def repository(self) -> ContentRepository:
        return self._repository

    @property
    def vector_store(self) -> VectorStore:
        return self._vectors

    def _lock_for(self, fp: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(fp)
            if lock is None:
                lock = threading.Lock()
                self._locks[fp] = lock
            return lock

    # -- Ingestion -----------------------------------------------------------

    @staticmethod
    def _validate(request: IngestRequest | Mapping[str, Any]) -> IngestRequest:
        if not isinstance(request, IngestRequest):
            try:
                request = IngestRequest.model_validate(request)
            except ValidationError as exc:
                raise MalformedInput(f"Invalid ingest request: {exc}") from exc
        if not request.content.strip():
            raise MalformedInput("Ingest request has empty content")
        return request

    def ingest(
        self,
        request: IngestRequest | Mapping[str, Any],
        now: datetime | None = None,
    ) -> IngestResult:
        """Store new content or merge a repeat submission, then index it.

        Args:
            request: An IngestRequest or a mapping that validates as one.
            now: Evaluation time for scoring.  Defaults to the current time.

        Returns:
            The stored item, whether it was a duplicate, and the index result.

        Raises:
            MalformedInput: If the request is invalid, has no
                fingerprintable content, or carries a naive timestamp.
            DimensionMismatch: If the embedding provider changed
                dimensionality mid-process.
        """
        if now is not None and now.tzinfo is None:
            raise MalformedInput("Evaluation time must be timezone-aware")
        request = self._validate(request)
        fp = fingerprint_request(request)
        if not fp:
            raise MalformedInput("Ingest request has no fingerprintable content")

        scoring = self._config.scoring
        with self._lock_for(fp):
            existing = find_existing(self._repository.get_all(), fp)
            if existing is not None:
                item = merge_submission(existing, submission_from_request(request), now, scoring)
            else:
                item = create_item(request, now, scoring)
            self._repository.upsert(item)
            index = self._vectors.upsert(item)

        if existing is not None:
            logger.info(
                "Merged duplicate %s (submissions=%d, importance=%.2f, urgency=%s)",
                item.id,
                item.submission_count,
                item.importance_score,
                item.urgency_level.value,
            )
        else:
            logger.info("Stored new %s item %s (fingerprint=%s)", item.type.value, item.id, fp)
        return IngestResult(item=item, is_duplicate=existing is not None, index=index)

    # -- Deletion ------------------------------------------------------------

    def delete(self, item_id: str) -> DeleteResult:
        """Remove an item and its vector record.  Unknown ids are a no-op."""
        item = self._repository.get(item_id)
        if item is None:
            removed = self._vectors.remove(item_id)
            if not removed:
                logger.info("No content item with id %s", item_id)
                notice = f"No content item with id {item_id}"
                return DeleteResult(deleted=False, notice=notice)
            logger.info("Removed orphaned vector record %s", item_id)
            return DeleteResult(deleted=True, notice="Removed orphaned vector record")

        with self._lock_for(item.fingerprint):
            self._repository.delete(item_id)
            self._vectors.remove(item_id)
        logger.info("Deleted item %s", item_id)
        return DeleteResult(deleted=True)

    # -- Query ---------------------------------------------------------------

    def query(
        self,
        text: str,
        options: SearchOptions | None = None,
        now: datetime | None = None,
    ) -> QueryResult:
        """Answer a free-text question over the stored content.

        Args:
            text: The question.
            options: Base limit and filters; the analysis may tighten them.
            now: Evaluation time for time windows and recency.

        Returns:
            The analysis, the effective search options, ranked results,
            and the composed response.
        """
        analysis = analyze_query(text)
        search_options = build_search_options(analysis, options, self._config.query)
        found = self._vectors.search(
            text,
            filters=search_options.filters,
            limit=search_options.limit,
            now=now,
        )
        response = self._composer.compose(text, analysis, found.results, now)
        logger.debug(
            "Query %r: intent=%s found=%d response=%s",
            text,
            analysis.primary_intent.value,
            found.total_found,
            response.type.value,
        )
        return QueryResult(
            query=text,
            analysis=analysis,
            search_options=search_options,
            results=found.results,
            total_found=found.total_found,
            response=response,
        )

    # -- Maintenance ---------------------------------------------------------

    def rebuild(self) -> int:
        """Re-index every persisted item.  Returns the number indexed."""
        items = self._repository.get_all()
        self._vectors.clear()
        for item in items:
            self._vectors.upsert(item)
        logger.info("Rebuilt vector index with %d item(s)", len(items))
        return len(items)

    def stats(self) -> EngineStats:
        return EngineStats(
            total_items=len(self._repository.get_all()),
            vector_store=self._vectors.stats(),
        )
