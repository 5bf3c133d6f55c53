"""Semantic memory: embeddings, file-backed store, audit log, core memory."""

from steward.memory.models import MemoryEntry, RecalledMemory
from steward.memory.service import MemoryService

__all__ = ["MemoryEntry", "MemoryService", "RecalledMemory"]
