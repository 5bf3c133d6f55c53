"""ScratchSpace — sandboxed local directory where artifacts are saved."""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
import re
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from steward.tools.base import Artifact

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MB per file

_SAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9._\-]")


class ScratchSpace:
    """Sandboxed local filesystem for files produced by tools.

    Every file lives directly under ``root``; subdirectories are not allowed.
    """

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @staticmethod
    def sanitize_filename(name: str) -> str:
        """Replace unsafe characters, strip leading dots, truncate to 255 chars.

        Raises ``ValueError`` if the result is empty.
        """
        sanitized = _SAFE_FILENAME_RE.sub("_", name).lstrip(".")[:255]
        if not sanitized:
            msg = f"Filename is empty after sanitization: {name!r}"
            raise ValueError(msg)
        return sanitized

    def resolve(self, name: str) -> Path:
        """Resolve a filename inside the scratch root (no traversal)."""
        target = (self._root / self.sanitize_filename(name)).resolve()
        if target.parent != self._root:
            msg = f"Path traversal detected: {name!r}"
            raise ValueError(msg)
        return target

    def write(self, name: str, content: bytes) -> Path:
        """Write bytes to a file in the scratch space. Returns the absolute path."""
        if len(content) > MAX_FILE_SIZE:
            msg = f"File too large: {len(content)} bytes (max {MAX_FILE_SIZE})"
            raise ValueError(msg)
        target = self.resolve(name)
        target.write_bytes(content)
        return target

    def save_artifact(self, artifact: Artifact) -> Path:
        """Decode an artifact's base64 payload and write it to a new file.

        Raises ``ValueError`` if the payload is not valid base64.
        """
        try:
            data = base64.b64decode(artifact.data, validate=True)
        except binascii.Error as exc:
            msg = "Artifact payload is not valid base64"
            raise ValueError(msg) from exc

        extension = mimetypes.guess_extension(artifact.mime_type) or ".bin"
        stamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
        path = self.write(f"artifact_{stamp}_{uuid.uuid4().hex[:6]}{extension}", data)
        logger.info("Saved artifact (%s, %d bytes) to %s", artifact.mime_type, len(data), path)
        return path
