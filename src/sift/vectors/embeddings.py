"""Embedding providers.

Every provider turns text into a fixed-length vector.  The length is
fixed for the lifetime of the process: the remote provider is asked for
vectors of the configured size and the local hash fallback produces the
same size, so falling back never mixes dimensionalities in the store.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol, runtime_checkable

import openai

from sift.config import EmbeddingConfig
from sift.errors import DimensionMismatch, ProviderUnavailable

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 384

# Only the first N words feed the hash embedding
_HASH_MAX_WORDS = 50


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that can embed text into ``dimensions`` floats."""

    name: str

    @property
    def dimensions(self) -> int: ...

    def embed(self, text: str) -> list[float]: ...


class HashEmbeddingProvider:
    """Deterministic local embedding used when no remote provider is available.

    Character codes of the first fifty words are hashed into buckets and
    the resulting count vector is L2-normalised.  Not semantic, but
    identical text always maps to the identical vector and overlapping
    vocabulary yields positive similarity.
    """

    name = "local-hash"

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS) -> None:
        if dimensions <= 0:
            raise ValueError(f"dimensions must be positive, got {dimensions}")
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        words = text.lower().split()[:_HASH_MAX_WORDS]
        for i, word in enumerate(words):
            for j, char in enumerate(word):
                vector[(i * 7 + j * 13 + ord(char)) % self._dimensions] += 1.0

        magnitude = math.sqrt(sum(v * v for v in vector))
        if magnitude == 0.0:
            return vector
        return [v / magnitude for v in vector]


class OpenAIEmbeddingProvider:
    """Remote embeddings through the OpenAI API, with a bounded timeout."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = DEFAULT_DIMENSIONS,
        timeout: float = 10.0,
        client: openai.OpenAI | None = None,
    ) -> None:
        self._model = model
        self._dimensions = dimensions
        self._client = client or openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=1)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        if not text.strip():
            raise ProviderUnavailable("Cannot embed empty text remotely")
        try:
            response = self._client.embeddings.create(
                input=text,
                model=self._model,
                dimensions=self._dimensions,
            )
        except openai.OpenAIError as exc:
            raise ProviderUnavailable(f"OpenAI embedding failed: {exc}") from exc

        if not response.data:
            raise ProviderUnavailable("OpenAI embedding returned no data")
        embedding = [float(x) for x in response.data[0].embedding]
        if len(embedding) != self._dimensions:
            raise DimensionMismatch(self._dimensions, len(embedding))
        return embedding


class FallbackEmbeddingProvider:
    """Try *primary*; on ProviderUnavailable use *fallback* instead."""

    def __init__(self, primary: EmbeddingProvider, fallback: EmbeddingProvider) -> None:
        if primary.dimensions != fallback.dimensions:
            raise DimensionMismatch(primary.dimensions, fallback.dimensions)
        self._primary = primary
        self._fallback = fallback
        self.name = f"{primary.name}+{fallback.name}"

    @property
    def dimensions(self) -> int:
        return self._primary.dimensions

    def embed(self, text: str) -> list[float]:
        try:
            return self._primary.embed(text)
        except ProviderUnavailable as exc:
            logger.warning(
                "Embedding provider %s unavailable, using %s: %s",
                self._primary.name,
                self._fallback.name,
                exc,
            )
            return self._fallback.embed(text)


def create_embedding_provider(config: EmbeddingConfig | None = None) -> EmbeddingProvider:
    """Build the provider chain described by *config*.

    ``provider = "openai"`` with an API key yields OpenAI backed by the
    hash fallback; anything else yields the hash provider alone.
    """
    config = config or EmbeddingConfig()
    local = HashEmbeddingProvider(config.dimensions)

    if config.provider == "openai":
        if not config.api_key:
            logger.warning("OpenAI embeddings requested but no API key set, using local hash")
            return local
        remote = OpenAIEmbeddingProvider(
            api_key=config.api_key,
            model=config.model,
            dimensions=config.dimensions,
            timeout=config.timeout,
        )
        return FallbackEmbeddingProvider(remote, local)

    if config.provider != "local":
        logger.warning("Unknown embedding provider %r, using local hash", config.provider)
    return local
