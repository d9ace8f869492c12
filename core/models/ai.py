# =============================================================================
# core/models/ai.py - AI Relay Schemas
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel


class Sentiment(str, Enum):
    """Labels returned by POST /sentiment."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ChatRelayRequest(BaseModel):
    """
    Body of POST /chat.

    `messages` is left untyped so a malformed payload gets the endpoint's
    own 400 message instead of a validation error.
    """
    messages: Any = None


@dataclass
class EmbeddingResult:
    """An embedding vector and whether it came from the local fallback."""
    vector: np.ndarray = field(default_factory=lambda: np.zeros(0))
    using_fallback: bool = False

    def __len__(self) -> int:
        return int(self.vector.shape[0])
