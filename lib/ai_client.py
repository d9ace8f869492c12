# =============================================================================
# lib/ai_client.py - OpenAI Relay Helpers
# =============================================================================
# Small wrappers over the OpenAI SDK used by the AI endpoints:
# - generate_completion: one system prompt + one user prompt -> text
# - analyze_sentiment: text -> positive / negative / neutral
# - generate_embedding: text -> vector, falling back to a local hash embedding
#
# The local embedding is NOT semantic. It exists so /test-embedding and any
# memory feature keep working when the embeddings API is unavailable.
# =============================================================================

import logging
import re

import numpy as np

from app.config import settings
from core.models.ai import EmbeddingResult, Sentiment
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

SENTIMENT_SYSTEM_PROMPT = """You are a sentiment analysis assistant. Analyze the sentiment of the provided text and return it as:
- "positive"
- "negative"
- "neutral"

Provide only the sentiment label as plain text, nothing else."""

SENTIMENT_MAX_TOKENS = 100

_WORD_SPLIT = re.compile(r"\W+")

# Lazy-loaded OpenAI client
_client = None


class AIClientError(ApplicationError):
    """Error calling the OpenAI API."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            code="AI_CLIENT_ERROR",
            suggestion="Check your OPENAI_API_KEY and network connection",
            **kwargs,
        )


def get_openai_client():
    """Get or create OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        from openai import OpenAI
        _client = OpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


# =============================================================================
# Completions
# =============================================================================

def generate_completion(
    prompt: str,
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """
    Generate a single chat completion.

    Args:
        prompt: User message
        system_prompt: System message
        model: Model ID (default: settings.OPENAI_MODEL)
        temperature: Sampling temperature (default: settings.CHAT_TEMPERATURE)
        max_tokens: Completion budget (default: settings.CHAT_MAX_TOKENS)

    Returns:
        The assistant's reply ("" when the model returns no content)

    Raises:
        AIClientError: If the API call fails
    """
    model = model or settings.OPENAI_MODEL
    try:
        response = get_openai_client().chat.completions.create(
            model=model,
            temperature=temperature if temperature is not None else settings.CHAT_TEMPERATURE,
            max_tokens=max_tokens or settings.CHAT_MAX_TOKENS,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        )
    except Exception as e:
        logger.error(f"OpenAI API error: {e}")
        raise AIClientError(f"OpenAI API call failed: {e}", details={"model": model})

    return response.choices[0].message.content or ""


def normalize_sentiment(raw: str) -> Sentiment:
    """Map a free-form model reply onto a Sentiment label."""
    text = raw.strip().lower()
    for label in Sentiment:
        if label.value in text:
            return label
    return Sentiment.NEUTRAL


def analyze_sentiment(text: str) -> Sentiment:
    """
    Classify the sentiment of a text.

    Raises:
        AIClientError: If the API call fails
    """
    reply = generate_completion(
        text,
        system_prompt=SENTIMENT_SYSTEM_PROMPT,
        temperature=0.0,
        max_tokens=SENTIMENT_MAX_TOKENS,
    )
    sentiment = normalize_sentiment(reply)
    logger.debug(f"Sentiment reply {reply!r} -> {sentiment.value}")
    return sentiment


# =============================================================================
# Embeddings
# =============================================================================

def _hash32(word: str) -> int:
    # (hash << 5) - hash + char, wrapped to a signed 32-bit integer
    value = 0
    for char in word:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def generate_simple_embedding(text: str, dimensions: int | None = None) -> np.ndarray:
    """
    Deterministic bag-of-words embedding.

    Words are lowercased, split on non-word characters and kept when longer
    than two characters. Word i of n sets slot hash(word) % dimensions to
    (i + 1) / (n + 1); later words overwrite earlier ones on collision.
    """
    dimensions = dimensions or settings.EMBEDDING_DIMENSIONS
    vector = np.zeros(dimensions, dtype=np.float64)

    words = [w for w in _WORD_SPLIT.split(text.lower()) if len(w) > 2]
    count = len(words)
    for i, word in enumerate(words):
        vector[abs(_hash32(word)) % dimensions] = (i + 1) / (count + 1)

    return vector


def generate_embedding(text: str) -> EmbeddingResult:
    """
    Embed a text with the OpenAI embeddings API.

    Falls back to `generate_simple_embedding` on any API failure, so this
    never raises for a string input.
    """
    try:
        try:
            response = get_openai_client().embeddings.create(
                model=settings.OPENAI_EMBEDDING_MODEL,
                input=text,
            )
        except Exception as e:
            raise AIClientError(
                f"Embedding request failed: {e}",
                details={"model": settings.OPENAI_EMBEDDING_MODEL},
            )
        vector = np.asarray(response.data[0].embedding, dtype=np.float64)
        return EmbeddingResult(vector=vector, using_fallback=False)

    except AIClientError as e:
        logger.warning(f"Using fallback embedding: {e.message}")
        return EmbeddingResult(vector=generate_simple_embedding(text), using_fallback=True)


def cosine_similarity(a, b) -> float:
    """
    Cosine similarity of two vectors, clipped to [-1, 1].

    Returns 0.0 for empty, mismatched or zero-magnitude vectors.
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.size == 0 or vec_a.shape != vec_b.shape:
        return 0.0

    norm = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if norm == 0:
        return 0.0

    return float(np.clip(np.dot(vec_a, vec_b) / norm, -1.0, 1.0))
