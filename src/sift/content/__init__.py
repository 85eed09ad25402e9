"""Content domain — captured items, fingerprinting, and persistence.

A ContentItem is one logical piece of content; repeat submissions of the
same normalised text are merged into it instead of creating duplicates.
"""

from sift.content.fingerprint import (
    create_item,
    find_existing,
    fingerprint,
    merge_submission,
)
from sift.content.models import (
    ContentItem,
    ContentKind,
    FileMetadata,
    ImageMetadata,
    IngestRequest,
    ItemMetadata,
    Keyword,
    Submission,
    SubmissionPatterns,
    TimeSpan,
    Trend,
    UrgencyLevel,
    UrlMetadata,
    Velocity,
)
from sift.content.store import (
    ContentRepository,
    InMemoryContentRepository,
    JsonContentRepository,
)

__all__ = [
    "ContentItem",
    "ContentKind",
    "ContentRepository",
    "FileMetadata",
    "ImageMetadata",
    "InMemoryContentRepository",
    "IngestRequest",
    "ItemMetadata",
    "JsonContentRepository",
    "Keyword",
    "Submission",
    "SubmissionPatterns",
    "TimeSpan",
    "Trend",
    "UrgencyLevel",
    "UrlMetadata",
    "Velocity",
    "create_item",
    "find_existing",
    "fingerprint",
    "merge_submission",
]
