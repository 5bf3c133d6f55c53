"""Core memory: a small user-curated note that is always in context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class CoreMemory:
    """Reads ``core_memory.md``. The user edits the file by hand."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str:
        """Return the note, stripped, or an empty string if there is none."""
        if not self._path.exists():
            return ""
        try:
            return self._path.read_text(encoding="utf-8").strip()
        except OSError:
            logger.warning("Could not read core memory at %s", self._path)
            return ""
