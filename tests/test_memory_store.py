"""Tests for the JSON vector store, audit log, and core memory."""

import json

import pytest

from steward.memory.core import CoreMemory
from steward.memory.log import MemoryLog
from steward.memory.store import VectorStore


@pytest.fixture
def store(tmp_path) -> VectorStore:
    return VectorStore(tmp_path / "memories.json")


# -- VectorStore ---------------------------------------------------------------


def test_missing_file_is_empty_store(store: VectorStore) -> None:
    assert store.count() == 0
    assert store.search([1.0, 0.0], top_k=3) == []


def test_corrupt_file_is_empty_store(store: VectorStore) -> None:
    store.path.write_text("{not json")
    assert store.count() == 0
    assert store.all() == []


def test_add_increments_count(store: VectorStore) -> None:
    store.add("A", [1.0, 0.0])
    assert store.count() == 1
    store.add("B", [0.0, 1.0])
    assert store.count() == 2


def test_add_writes_versioned_file(store: VectorStore) -> None:
    entry = store.add("likes tea", [1.0, 0.0], source="auto")

    raw = json.loads(store.path.read_text())
    assert raw["version"] == 1
    assert raw["entries"][0]["id"] == entry.id
    assert raw["entries"][0]["text"] == "likes tea"
    assert raw["entries"][0]["source"] == "auto"
    assert entry.id.startswith("mem_")


def test_add_after_corrupt_file_starts_fresh(store: VectorStore) -> None:
    store.path.write_text("garbage")
    store.add("A", [1.0, 0.0])
    assert [e.text for e in store.all()] == ["A"]


def test_add_rejects_dimension_mismatch(store: VectorStore) -> None:
    store.add("A", [1.0, 0.0])
    with pytest.raises(ValueError, match="dimension mismatch"):
        store.add("B", [1.0, 0.0, 0.0])
    assert store.count() == 1


def test_search_orders_by_similarity(store: VectorStore) -> None:
    store.add("far", [0.0, 1.0])
    store.add("near", [1.0, 0.1])
    store.add("middle", [1.0, 1.0])

    results = store.search([1.0, 0.0], top_k=3)

    assert [r.entry.text for r in results] == ["near", "middle", "far"]
    assert results[0].score > results[1].score > results[2].score


def test_search_limits_to_top_k(store: VectorStore) -> None:
    for i in range(5):
        store.add(f"m{i}", [1.0, float(i)])
    assert len(store.search([1.0, 0.0], top_k=2)) == 2
    assert store.search([1.0, 0.0], top_k=0) == []


def test_search_ties_keep_insertion_order(store: VectorStore) -> None:
    first = store.add("first", [1.0, 0.0])
    second = store.add("second", [1.0, 0.0])

    results = store.search([1.0, 0.0], top_k=2)

    assert [r.entry.id for r in results] == [first.id, second.id]


def test_no_temp_files_left_behind(store: VectorStore) -> None:
    store.add("A", [1.0, 0.0])
    leftovers = [p.name for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


# -- MemoryLog -----------------------------------------------------------------


def test_log_appends_one_line_per_memory(tmp_path) -> None:
    log = MemoryLog(tmp_path / "memory_log.md")

    log.append("likes tea", "user")
    log.append("multi\nline   text", "auto")

    lines = log.read_lines()
    assert len(lines) == 2
    assert lines[0].startswith("- **[")
    assert lines[0].endswith("(user) likes tea")
    assert lines[1].endswith("(auto) multi line text")


def test_log_missing_file_has_no_lines(tmp_path) -> None:
    assert MemoryLog(tmp_path / "nope.md").read_lines() == []


# -- CoreMemory ----------------------------------------------------------------


def test_core_memory_reads_stripped_text(tmp_path) -> None:
    path = tmp_path / "core_memory.md"
    path.write_text("\n  Prefers metric units.\n\n")
    assert CoreMemory(path).read() == "Prefers metric units."


def test_core_memory_missing_file(tmp_path) -> None:
    assert CoreMemory(tmp_path / "core_memory.md").read() == ""
