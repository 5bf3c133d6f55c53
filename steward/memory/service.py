"""Memory service: store, recall, and build the prompt context block."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from steward.memory.core import CoreMemory
from steward.memory.embeddings import build_embedder
from steward.memory.log import MemoryLog
from steward.memory.models import MemoryEntry, MemorySource, RecalledMemory
from steward.memory.store import VectorStore

if TYPE_CHECKING:
    from pathlib import Path

    from steward.config import Settings
    from steward.memory.embeddings import Embedder

logger = logging.getLogger(__name__)

STORE_FILENAME = "memories.json"
LOG_FILENAME = "memory_log.md"
CORE_FILENAME = "core_memory.md"

MIN_RELEVANCE = 0.3
DEFAULT_TOP_K = 3


class MemoryService:
    """Semantic memory for one assistant.

    Owns a vector store, its audit log, and the core-memory note. Pass a
    different ``memory_dir`` (e.g. ``tmp_path``) for test isolation.
    """

    def __init__(
        self,
        memory_dir: Path,
        embedder: Embedder,
        *,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = MIN_RELEVANCE,
    ) -> None:
        self._embedder = embedder
        self._top_k = top_k
        self._min_score = min_score
        self.store = VectorStore(memory_dir / STORE_FILENAME)
        self.log = MemoryLog(memory_dir / LOG_FILENAME)
        self.core = CoreMemory(memory_dir / CORE_FILENAME)

    @classmethod
    def from_settings(cls, settings: Settings) -> MemoryService:
        return cls(
            settings.memory_dir,
            build_embedder(settings),
            top_k=settings.memory_top_k,
            min_score=settings.memory_min_score,
        )

    # -- Write ---------------------------------------------------------------

    async def store_memory(self, text: str, source: MemorySource = "user") -> MemoryEntry:
        """Embed and persist a memory, then record it in the audit log.

        Any failure propagates to the caller. The writes are not atomic
        together: if the log append fails, the record already added to the
        store stays there.
        """
        embedding = await self._embedder.embed(text)
        entry = self.store.add(text, embedding, source)
        self.log.append(text, source)
        preview = text if len(text) <= 60 else f"{text[:60]}..."
        logger.info("Memory stored (%s): %s", source, preview)
        return entry

    # -- Read ----------------------------------------------------------------

    async def recall_memories(self, query: str, top_k: int | None = None) -> list[RecalledMemory]:
        """Top-K memories for a query, best first, above the relevance floor."""
        query_embedding = await self._embedder.embed(query)
        results = self.store.search(query_embedding, top_k if top_k is not None else self._top_k)
        return [
            RecalledMemory(
                text=r.entry.text,
                score=r.score,
                timestamp=r.entry.timestamp,
                source=r.entry.source,
            )
            for r in results
            if r.score > self._min_score
        ]

    async def get_memory_context(self, query: str) -> str:
        """Core memory plus recalled memories, formatted for the system prompt.

        Sections with no content are left out; returns "" if both are empty.
        """
        parts: list[str] = []

        core = self.core.read()
        if core:
            parts.append(f"## Core Memory (stable preferences)\n{core}")

        memories = await self.recall_memories(query)
        if memories:
            items = "\n".join(
                f"{i}. [{m.timestamp}] {m.text}" for i, m in enumerate(memories, start=1)
            )
            parts.append(f"## Recalled Memories\n{items}")

        return "\n\n".join(parts)

    def count(self) -> int:
        return self.store.count()
