"""sift — content intelligence engine.

Deduplicates captured content by fingerprint, scores it by how often and
how recently it was resubmitted, and answers natural-language questions
with ranked, explained results.
"""

from sift.config import SiftConfig, load_config
from sift.content.models import ContentItem, ContentKind, IngestRequest
from sift.engine import ContentEngine, DeleteResult, EngineStats, IngestResult
from sift.errors import DimensionMismatch, MalformedInput, ProviderUnavailable, SiftError
from sift.query.models import QueryResult, SearchOptions

__version__ = "0.1.0"

__all__ = [
    "ContentEngine",
    "ContentItem",
    "ContentKind",
    "DeleteResult",
    "DimensionMismatch",
    "EngineStats",
    "IngestRequest",
    "IngestResult",
    "MalformedInput",
    "ProviderUnavailable",
    "QueryResult",
    "SearchOptions",
    "SiftConfig",
    "SiftError",
    "load_config",
]
