"""Shared test fixtures."""

import pytest

from steward.memory.embeddings import HashEmbedder
from steward.memory.service import MemoryService
from steward.scratch import ScratchSpace


@pytest.fixture
def memory(tmp_path) -> MemoryService:
    """MemoryService with hash embeddings rooted in a temporary directory."""
    return MemoryService(tmp_path / "memory", HashEmbedder(64))


@pytest.fixture
def scratch(tmp_path) -> ScratchSpace:
    """Create a ScratchSpace rooted in a temporary directory."""
    return ScratchSpace(tmp_path / "scratch")


@pytest.fixture
def sleeps() -> list[float]:
    """Delays recorded by ``fake_sleep``."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep
