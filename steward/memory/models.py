"""Data models for the memory store."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MemorySource = Literal["user", "auto"]

STORE_VERSION = 1


class MemoryEntry(BaseModel):
    """A stored memory. Never modified after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    embedding: list[float]
    timestamp: str
    source: MemorySource = "user"


class StoreFile(BaseModel):
    """On-disk layout of the memory store."""

    version: int = STORE_VERSION
    entries: list[MemoryEntry] = Field(default_factory=list)


class ScoredEntry(BaseModel):
    """A stored memory paired with its similarity to a query."""

    entry: MemoryEntry
    score: float


class RecalledMemory(BaseModel):
    """A memory returned by recall, without its embedding."""

    text: str
    score: float
    timestamp: str
    source: MemorySource = "user"
