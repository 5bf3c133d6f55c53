"""Append-only, human-readable audit log of memory writes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from steward.memory.models import MemorySource


class MemoryLog:
    """One markdown bullet per stored memory, never rewritten."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, text: str, source: MemorySource) -> str:
        """Append a timestamped line and return it. Raises OSError on failure."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(UTC).isoformat()
        one_line = " ".join(text.split())
        entry = f"- **[{timestamp}]** ({source}) {one_line}\n"
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(entry)
        return entry

    def read_lines(self) -> list[str]:
        if not self._path.exists():
            return []
        return self._path.read_text(encoding="utf-8").splitlines()
