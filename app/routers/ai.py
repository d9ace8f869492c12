# =============================================================================
# app/routers/ai.py - AI Relay Endpoints
# =============================================================================
# Thin relays to OpenAI:
# - /chat: one system + one user message -> completion
# - /sentiment: text -> positive / negative / neutral (plain text)
# - /test-embedding: embedding smoke test with local fallback and an
#   optional similarity score
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse

from app.config import settings
from app.exceptions import InvalidRequestError, UpstreamServiceError
from core.models.ai import ChatRelayRequest
from lib.ai_client import (
    AIClientError,
    analyze_sentiment,
    cosine_similarity,
    generate_completion,
    generate_embedding,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_EMBEDDING_TEXT = "This is a test text for embedding generation."
EMBEDDING_PREVIEW_SIZE = 10


# =============================================================================
# Chat
# =============================================================================

@router.post("/chat")
async def chat(body: ChatRelayRequest):
    """
    Relay a chat completion.

    Expects {"messages": [{"role": "system", ...}, {"role": "user", ...}]};
    the first system and the first user message are used.
    """
    messages = body.messages
    if not messages or not isinstance(messages, list):
        raise InvalidRequestError("Invalid request: messages array is required")

    def first(role: str) -> dict | None:
        return next((m for m in messages if isinstance(m, dict) and m.get("role") == role), None)

    system_message = first("system")
    user_message = first("user")
    if not system_message or not user_message:
        raise InvalidRequestError("Invalid request: system and user messages are required")

    try:
        response = generate_completion(
            str(user_message.get("content") or ""),
            system_prompt=str(system_message.get("content") or ""),
        )
    except AIClientError as e:
        raise UpstreamServiceError("Failed to generate response", service="openai", error=e.message)

    return {"response": response}


@router.get("/chat")
async def chat_usage():
    return {
        "message": "This is a POST-only chat endpoint",
        "usage": 'Send a POST request with { "messages": [{ "role": "system/user", "content": "message" }] }',
        "example": {
            "messages": [
                {"role": "system", "content": "You are a helpful assistant."},
                {"role": "user", "content": "Hello, how are you?"},
            ]
        },
    }


# =============================================================================
# Sentiment
# =============================================================================

@router.post("/sentiment", response_class=PlainTextResponse)
async def sentiment(request: Request):
    """
    Classify the sentiment of {"query": "..."}.

    Every response, errors included, is text/plain.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    query = payload.get("query") if isinstance(payload, dict) else None
    if not query or not isinstance(query, str):
        return PlainTextResponse("Query is required and must be string", status_code=400)

    try:
        label = analyze_sentiment(query)
    except AIClientError as e:
        logger.error(f"Error in sentiment analysis: {e.message}")
        return PlainTextResponse("Error analyzing sentiment", status_code=500)

    return PlainTextResponse(label.value)


@router.get("/sentiment")
async def sentiment_usage():
    return {
        "message": "This is a POST-only sentiment analysis endpoint",
        "usage": 'Send a POST request with {"query": "your text here"}',
        "example": {"query": "I love this product!"},
        "returns": "positive, negative, or neutral",
    }


# =============================================================================
# Embeddings
# =============================================================================

@router.get("/test-embedding")
async def test_embedding(
    text: Annotated[str | None, Query(description="Text to embed")] = None,
    compare: Annotated[str | None, Query(description="Second text to score against `text`")] = None,
):
    """
    Embed a text and report whether the local fallback was used.

    With `compare`, both texts are embedded and their cosine similarity is
    added as `similarity`.
    """
    text = text or DEFAULT_EMBEDDING_TEXT
    result = generate_embedding(text)
    source = "fallback" if result.using_fallback else "OpenAI"
    logger.info(f"Generated {source} embedding with {len(result)} dimensions")

    body = {
        "status": "success",
        "usingFallback": result.using_fallback,
        "text": text,
        "embeddingLength": len(result),
        "embeddingPreview": result.vector[:EMBEDDING_PREVIEW_SIZE].tolist(),
        "apiKeyConfigured": bool(settings.OPENAI_API_KEY),
    }
    if compare:
        other = generate_embedding(compare)
        body["compare"] = compare
        body["similarity"] = cosine_similarity(result.vector, other.vector)
    return body
