"""Error types shared across the engine."""

from __future__ import annotations


class SiftError(Exception):
    """Base error for the content intelligence engine."""


class ProviderUnavailable(SiftError):
    """An embedding or generative provider failed or timed out.

    Always recovered locally: callers fall back to the deterministic
    embedding or the templated response.
    """


class DimensionMismatch(SiftError):
    """Embedding vectors of different lengths were compared.

    This means the embedding provider changed mid-process and is a
    configuration error, not a per-query failure.
    """

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual} "
            "(embedding provider changed?)"
        )
        self.expected = expected
        self.actual = actual


class MalformedInput(SiftError, ValueError):
    """Ingestion input is missing required fields."""
