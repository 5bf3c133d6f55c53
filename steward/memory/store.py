"""File-backed vector store for memories.

The whole file is read on every access and rewritten on every write.
There is no incremental index; at personal-assistant scale a linear scan
is fine.

Concurrent writers race on read-modify-write and the last write wins.
The store assumes a single process with a single writer at a time; add
per-write locking before relying on concurrent writers.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError

from steward.memory.embeddings import cosine_similarity
from steward.memory.models import MemoryEntry, MemorySource, ScoredEntry, StoreFile

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class VectorStore:
    """Append-only (logically) collection of embedded memories in a JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    # -- Persistence ---------------------------------------------------------

    def _load(self) -> StoreFile:
        """Read the store. Missing or unreadable files yield an empty store."""
        if not self._path.exists():
            return StoreFile()
        try:
            raw = self._path.read_text(encoding="utf-8")
            return StoreFile.model_validate_json(raw)
        except (OSError, ValueError, ValidationError):
            logger.warning("Memory store at %s is unreadable — treating as empty", self._path)
            return StoreFile()

    def _save(self, store: StoreFile) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(store.model_dump(mode="json"), indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".memories-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except Exception:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    # -- Write ---------------------------------------------------------------

    def add(
        self,
        text: str,
        embedding: list[float],
        source: MemorySource = "user",
    ) -> MemoryEntry:
        """Append a new memory and rewrite the file.

        Raises:
            ValueError: If the embedding's dimensionality differs from the
                entries already in the store.
            OSError: If the file cannot be written.
        """
        store = self._load()
        if store.entries and len(store.entries[0].embedding) != len(embedding):
            msg = (
                f"Embedding dimension mismatch: store has {len(store.entries[0].embedding)}, "
                f"got {len(embedding)}"
            )
            raise ValueError(msg)

        entry = MemoryEntry(
            id=f"mem_{uuid.uuid4().hex[:16]}",
            text=text,
            embedding=list(embedding),
            timestamp=datetime.now(UTC).isoformat(),
            source=source,
        )
        store.entries.append(entry)
        self._save(store)
        return entry

    # -- Read ----------------------------------------------------------------

    def search(self, query_embedding: list[float], top_k: int = 3) -> list[ScoredEntry]:
        """Top-K entries by cosine similarity, best first.

        Equal scores keep insertion order. Entries whose dimensionality
        doesn't match the query are skipped.
        """
        if top_k <= 0:
            return []

        scored: list[ScoredEntry] = []
        for entry in self._load().entries:
            if len(entry.embedding) != len(query_embedding):
                logger.warning("Skipping memory %s: embedding dimension mismatch", entry.id)
                continue
            scored.append(
                ScoredEntry(entry=entry, score=cosine_similarity(query_embedding, entry.embedding))
            )

        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:top_k]

    def all(self) -> list[MemoryEntry]:
        return list(self._load().entries)

    def count(self) -> int:
        """Total number of stored memories."""
        return len(self._load().entries)
