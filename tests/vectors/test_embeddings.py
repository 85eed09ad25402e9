"""Tests for sift.vectors.embeddings — hash, OpenAI, fallback chain."""

from __future__ import annotations

import math
from unittest.mock import MagicMock

import openai
import pytest

from sift.config import EmbeddingConfig
from sift.errors import DimensionMismatch, ProviderUnavailable
from sift.vectors.embeddings import (
    EmbeddingProvider,
    FallbackEmbeddingProvider,
    HashEmbeddingProvider,
    OpenAIEmbeddingProvider,
    create_embedding_provider,
)


def _make_client(embedding: list[float] | None = None, error: Exception | None = None) -> MagicMock:
    """Mock openai.OpenAI client returning one embedding."""
    client = MagicMock()
    if error is not None:
        client.embeddings.create.side_effect = error
    else:
        client.embeddings.create.return_value = MagicMock(
            data=[MagicMock(embedding=embedding or [0.1, 0.2, 0.3, 0.4])]
        )
    return client


class TestHashEmbedding:
    def test_dimensions(self):
        assert len(HashEmbeddingProvider(64).embed("hello world")) == 64

    def test_deterministic(self):
        provider = HashEmbeddingProvider()
        assert provider.embed("buy milk") == provider.embed("buy milk")

    def test_unit_length(self):
        vector = HashEmbeddingProvider().embed("some text to embed")
        assert math.sqrt(sum(v * v for v in vector)) == pytest.approx(1.0)

    def test_case_insensitive(self):
        provider = HashEmbeddingProvider()
        assert provider.embed("Buy Milk") == provider.embed("buy milk")

    def test_empty_text_is_zero_vector(self):
        assert HashEmbeddingProvider(8).embed("") == [0.0] * 8

    def test_only_first_fifty_words(self):
        provider = HashEmbeddingProvider()
        base = " ".join(f"w{i}" for i in range(50))
        assert provider.embed(base) == provider.embed(base + " extra words here")

    def test_rejects_non_positive_dimensions(self):
        with pytest.raises(ValueError):
            HashEmbeddingProvider(0)

    def test_satisfies_protocol(self):
        assert isinstance(HashEmbeddingProvider(), EmbeddingProvider)


class TestOpenAIEmbedding:
    def test_returns_embedding(self):
        client = _make_client([0.1, 0.2, 0.3, 0.4])
        provider = OpenAIEmbeddingProvider("key", dimensions=4, client=client)
        assert provider.embed("hello") == [0.1, 0.2, 0.3, 0.4]

    def test_passes_model_and_dimensions(self):
        client = _make_client([0.0] * 4)
        provider = OpenAIEmbeddingProvider("key", model="m", dimensions=4, client=client)
        provider.embed("hello")
        client.embeddings.create.assert_called_once_with(input="hello", model="m", dimensions=4)

    def test_api_error_raises_provider_unavailable(self):
        client = _make_client(error=openai.OpenAIError("boom"))
        provider = OpenAIEmbeddingProvider("key", dimensions=4, client=client)
        with pytest.raises(ProviderUnavailable) as exc_info:
            provider.embed("hello")
        assert isinstance(exc_info.value.__cause__, openai.OpenAIError)

    def test_empty_text_raises_provider_unavailable(self):
        provider = OpenAIEmbeddingProvider("key", dimensions=4, client=_make_client())
        with pytest.raises(ProviderUnavailable):
            provider.embed("   ")

    def test_no_data_raises_provider_unavailable(self):
        client = MagicMock()
        client.embeddings.create.return_value = MagicMock(data=[])
        provider = OpenAIEmbeddingProvider("key", dimensions=4, client=client)
        with pytest.raises(ProviderUnavailable):
            provider.embed("hello")

    def test_wrong_length_raises_dimension_mismatch(self):
        provider = OpenAIEmbeddingProvider("key", dimensions=8, client=_make_client([0.1] * 4))
        with pytest.raises(DimensionMismatch):
            provider.embed("hello")


class TestFallbackEmbedding:
    def test_uses_primary_when_available(self):
        primary = OpenAIEmbeddingProvider("key", dimensions=4, client=_make_client([1.0, 0, 0, 0]))
        provider = FallbackEmbeddingProvider(primary, HashEmbeddingProvider(4))
        assert provider.embed("hello") == [1.0, 0, 0, 0]

    def test_falls_back_on_unavailable(self, caplog: pytest.LogCaptureFixture):
        primary = OpenAIEmbeddingProvider(
            "key", dimensions=4, client=_make_client(error=openai.OpenAIError("down"))
        )
        fallback = HashEmbeddingProvider(4)
        provider = FallbackEmbeddingProvider(primary, fallback)

        assert provider.embed("hello") == fallback.embed("hello")
        assert "unavailable" in caplog.text

    def test_dimension_mismatch_rejected_at_construction(self):
        primary = OpenAIEmbeddingProvider("key", dimensions=8, client=_make_client())
        with pytest.raises(DimensionMismatch):
            FallbackEmbeddingProvider(primary, HashEmbeddingProvider(4))

    def test_name_and_dimensions(self):
        primary = OpenAIEmbeddingProvider("key", dimensions=4, client=_make_client())
        provider = FallbackEmbeddingProvider(primary, HashEmbeddingProvider(4))
        assert provider.name == "openai+local-hash"
        assert provider.dimensions == 4


class TestCreateEmbeddingProvider:
    def test_default_is_local(self):
        provider = create_embedding_provider()
        assert isinstance(provider, HashEmbeddingProvider)
        assert provider.dimensions == 384

    def test_openai_with_key(self):
        provider = create_embedding_provider(
            EmbeddingConfig(provider="openai", api_key="sk-test", dimensions=256)
        )
        assert isinstance(provider, FallbackEmbeddingProvider)
        assert provider.dimensions == 256

    def test_openai_without_key_uses_local(self, caplog: pytest.LogCaptureFixture):
        provider = create_embedding_provider(EmbeddingConfig(provider="openai"))
        assert isinstance(provider, HashEmbeddingProvider)
        assert "no API key" in caplog.text

    def test_unknown_provider_uses_local(self):
        provider = create_embedding_provider(EmbeddingConfig(provider="cohere"))
        assert isinstance(provider, HashEmbeddingProvider)
