"""Text embeddings for semantic memory.

Two interchangeable backends:

- ``OpenAIEmbedder`` calls the OpenAI embeddings API.
- ``HashEmbedder`` derives a pseudo-random unit vector from a hash of the
  text. Same text, same vector, no network. Used in mock mode and tests.
"""

from __future__ import annotations

import hashlib
import logging
import math
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from openai import AsyncOpenAI

    from steward.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 768


class Embedder(Protocol):
    dimensions: int

    async def embed(self, text: str) -> list[float]: ...


def normalize(vector: Sequence[float]) -> list[float]:
    """Scale a vector to unit L2 norm. Zero vectors are returned unchanged."""
    magnitude = math.sqrt(math.fsum(v * v for v in vector))
    if magnitude == 0:
        return list(vector)
    return [v / magnitude for v in vector]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors; 0.0 if either is zero."""
    if len(a) != len(b):
        msg = f"Vector length mismatch: {len(a)} != {len(b)}"
        raise ValueError(msg)
    dot = math.fsum(x * y for x, y in zip(a, b, strict=True))
    mag_a = math.sqrt(math.fsum(x * x for x in a))
    mag_b = math.sqrt(math.fsum(y * y for y in b))
    denominator = mag_a * mag_b
    if denominator == 0:
        return 0.0
    return dot / denominator


class HashEmbedder:
    """Deterministic hash-seeded embedding for offline use."""

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS) -> None:
        self.dimensions = dimensions

    def embed_sync(self, text: str) -> list[float]:
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
        rng = random.Random(seed)
        return normalize([rng.gauss(0.0, 1.0) for _ in range(self.dimensions)])

    async def embed(self, text: str) -> list[float]:
        return self.embed_sync(text)


class OpenAIEmbedder:
    """Embeddings from the OpenAI API, unit-normalized."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = DEFAULT_DIMENSIONS,
    ) -> None:
        self.dimensions = dimensions
        self._model = model
        self._api_key = api_key
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def embed(self, text: str) -> list[float]:
        response = await self._get_client().embeddings.create(
            model=self._model,
            input=text,
            dimensions=self.dimensions,
        )
        return normalize(response.data[0].embedding)


def build_embedder(settings: Settings) -> Embedder:
    """Pick the embedding backend for the given settings."""
    if settings.memory_mock or not settings.openai_api_key:
        if not settings.memory_mock:
            logger.warning("OPENAI_API_KEY not set — using hash embeddings for memory")
        return HashEmbedder(settings.embedding_dims)
    return OpenAIEmbedder(
        api_key=settings.openai_api_key,
        model=settings.embedding_model,
        dimensions=settings.embedding_dims,
    )
