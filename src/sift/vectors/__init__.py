"""Vector domain — embedding providers and the ranked in-memory store."""

from sift.vectors.embeddings import (
    EmbeddingProvider,
    FallbackEmbeddingProvider,
    HashEmbeddingProvider,
    OpenAIEmbeddingProvider,
    create_embedding_provider,
)
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
from sift.vectors.store import VectorStore, build_document, cosine_similarity

__all__ = [
    "DerivedMetadata",
    "EmbeddingProvider",
    "EmbeddingRecord",
    "FallbackEmbeddingProvider",
    "HashEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "RankedResult",
    "ScoreBreakdown",
    "SearchFilters",
    "SearchResults",
    "StoreStats",
    "UpsertResult",
    "VectorStore",
    "build_document",
    "cosine_similarity",
    "create_embedding_provider",
]
