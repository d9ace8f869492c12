# =============================================================================
# tests/test_ai_client.py - OpenAI Relay Helper Tests
# =============================================================================
# The OpenAI client is always mocked; no network calls are made.
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from core.models.ai import Sentiment
from lib.ai_client import (
    AIClientError,
    _hash32,
    analyze_sentiment,
    cosine_similarity,
    generate_completion,
    generate_embedding,
    generate_simple_embedding,
    normalize_sentiment,
)


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture
def mock_openai():
    client = MagicMock()
    with patch("lib.ai_client.get_openai_client", return_value=client):
        yield client


class TestCompletion:
    """Tests for generate_completion."""

    def test_sends_system_and_user_messages(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion("Hello there")

        reply = generate_completion("Hi", system_prompt="Be brief.")

        assert reply == "Hello there"
        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi"},
        ]
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 1000

    def test_none_content_is_empty_string(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion(None)
        assert generate_completion("Hi") == ""

    def test_api_failure_raises(self, mock_openai):
        mock_openai.chat.completions.create.side_effect = RuntimeError("rate limited")

        with pytest.raises(AIClientError) as exc_info:
            generate_completion("Hi")
        assert "rate limited" in exc_info.value.message


class TestSentiment:
    """Tests for sentiment normalization."""

    @pytest.mark.parametrize("raw,expected", [
        ("positive", Sentiment.POSITIVE),
        ("  Negative.\n", Sentiment.NEGATIVE),
        ('"neutral"', Sentiment.NEUTRAL),
        ("I'd say mostly positive overall", Sentiment.POSITIVE),
        ("unclear", Sentiment.NEUTRAL),
        ("", Sentiment.NEUTRAL),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_sentiment(raw) is expected

    def test_analyze_uses_zero_temperature(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _completion("negative")

        assert analyze_sentiment("This is awful") is Sentiment.NEGATIVE
        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 100


class TestSimpleEmbedding:
    """Tests for the deterministic local embedding."""

    def test_hash_matches_32_bit_string_hash(self):
        assert _hash32("") == 0
        assert _hash32("a") == 97
        assert _hash32("ab") == 97 * 31 + 98
        # Wraps to a signed 32-bit value
        assert _hash32("hello world, this is long") == _hash32("hello world, this is long")
        assert -(2 ** 31) <= _hash32("a much longer string to overflow") < 2 ** 31

    def test_dimensions_and_determinism(self):
        first = generate_simple_embedding("Order shipped yesterday", dimensions=64)
        second = generate_simple_embedding("Order shipped yesterday", dimensions=64)

        assert first.shape == (64,)
        np.testing.assert_array_equal(first, second)

    def test_short_words_ignored(self):
        vector = generate_simple_embedding("a an to is", dimensions=32)
        assert not vector.any()

    def test_position_weights(self):
        """Word i of n gets (i + 1) / (n + 1)."""
        vector = generate_simple_embedding("order", dimensions=128)

        slot = abs(_hash32("order")) % 128
        assert vector[slot] == pytest.approx(0.5)
        assert np.count_nonzero(vector) == 1

    def test_case_and_punctuation_insensitive(self):
        np.testing.assert_array_equal(
            generate_simple_embedding("Hello, World!", dimensions=50),
            generate_simple_embedding("hello world", dimensions=50),
        )

    def test_default_dimensions(self):
        assert generate_simple_embedding("anything").shape == (1536,)


class TestEmbedding:
    """Tests for generate_embedding with fallback."""

    def test_openai_embedding(self, mock_openai):
        mock_openai.embeddings.create.return_value = SimpleNamespace(
            data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])]
        )

        result = generate_embedding("hello")

        assert not result.using_fallback
        assert len(result) == 3

    def test_fallback_on_failure(self, mock_openai):
        mock_openai.embeddings.create.side_effect = RuntimeError("down")

        result = generate_embedding("hello world")

        assert result.using_fallback
        np.testing.assert_array_equal(result.vector, generate_simple_embedding("hello world"))


class TestCosineSimilarity:
    def test_identical(self):
        assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)

    def test_opposite(self):
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_orthogonal(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    @pytest.mark.parametrize("a,b", [
        ([], []),
        ([1, 2], [1, 2, 3]),
        ([0, 0], [1, 1]),
    ])
    def test_degenerate_inputs(self, a, b):
        assert cosine_similarity(a, b) == 0.0
