"""Tests for ScratchSpace — sandboxed local filesystem."""

import base64

import pytest

from steward.scratch import ScratchSpace
from steward.tools.base import Artifact

# ---------------------------------------------------------------------------
# Init
# ---------------------------------------------------------------------------


def test_root_dir_created_on_construction(tmp_path) -> None:
    root = tmp_path / "new_scratch"
    assert not root.exists()
    ScratchSpace(root=root)
    assert root.is_dir()


# ---------------------------------------------------------------------------
# Sanitization
# ---------------------------------------------------------------------------


def test_sanitize_basic_chars() -> None:
    assert ScratchSpace.sanitize_filename("hello.txt") == "hello.txt"
    assert ScratchSpace.sanitize_filename("my-file_01.md") == "my-file_01.md"


def test_sanitize_special_chars_replaced() -> None:
    assert ScratchSpace.sanitize_filename("hello world!.txt") == "hello_world_.txt"


def test_sanitize_leading_dots_stripped() -> None:
    assert ScratchSpace.sanitize_filename(".hidden") == "hidden"


def test_sanitize_empty_raises() -> None:
    with pytest.raises(ValueError, match="empty after sanitization"):
        ScratchSpace.sanitize_filename("...")


def test_sanitize_path_separators_replaced(scratch: ScratchSpace) -> None:
    path = scratch.resolve("../../etc/passwd")
    assert path.parent == scratch.root


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


def test_write_bytes(scratch: ScratchSpace) -> None:
    path = scratch.write("out.bin", b"\x00\x01")
    assert path.read_bytes() == b"\x00\x01"


def test_write_rejects_oversized(scratch: ScratchSpace, monkeypatch) -> None:
    monkeypatch.setattr("steward.scratch.MAX_FILE_SIZE", 4)
    with pytest.raises(ValueError, match="File too large"):
        scratch.write("big.bin", b"12345")


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


def test_save_artifact_decodes_payload(scratch: ScratchSpace) -> None:
    artifact = Artifact(data=base64.b64encode(b"fake png").decode(), mime_type="image/png")

    path = scratch.save_artifact(artifact)

    assert path.parent == scratch.root
    assert path.name.startswith("artifact_")
    assert path.suffix == ".png"
    assert path.read_bytes() == b"fake png"


def test_save_artifact_unknown_mime_type(scratch: ScratchSpace) -> None:
    artifact = Artifact(data=base64.b64encode(b"x").decode(), mime_type="application/x-steward")
    assert scratch.save_artifact(artifact).suffix == ".bin"


def test_save_artifact_invalid_base64(scratch: ScratchSpace) -> None:
    with pytest.raises(ValueError, match="not valid base64"):
        scratch.save_artifact(Artifact(data="not base64!!"))


def test_save_artifact_unique_names(scratch: ScratchSpace) -> None:
    artifact = Artifact(data=base64.b64encode(b"x").decode())
    assert scratch.save_artifact(artifact) != scratch.save_artifact(artifact)
