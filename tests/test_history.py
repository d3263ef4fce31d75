"""Tests for query history navigation."""

from __future__ import annotations

from pathlib import Path

from qgo.history import QueryHistory


def test_add_skips_blank_and_repeated_entries() -> None:
    history = QueryHistory()

    for query in ["SELECT 1", "SELECT 1", "   ", "SELECT 2", "SELECT 1"]:
        history.add(query)

    assert history.entries == ("SELECT 1", "SELECT 2", "SELECT 1")


def test_history_is_bounded() -> None:
    history = QueryHistory(max_size=2)

    for index in range(5):
        history.add(f"SELECT {index}")

    assert history.entries == ("SELECT 3", "SELECT 4")


def test_previous_and_next_walk_entries() -> None:
    history = QueryHistory()
    for query in ["a", "b", "c"]:
        history.add(query)

    assert [history.previous() for _ in range(4)] == ["c", "b", "a", "a"]
    assert history.next() == "b"
    assert history.next() == "c"
    assert history.next() is None
    assert history.previous() == "c"


def test_navigation_on_empty_history() -> None:
    history = QueryHistory()

    assert history.previous() is None
    assert history.next() is None


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "history.txt"
    history = QueryHistory()
    for query in ["SELECT 1", "SELECT *\nFROM users", "tables"]:
        history.add(query)

    history.save(path)
    restored = QueryHistory()
    restored.load(path)

    assert restored.entries == ("SELECT 1", "SELECT * FROM users", "tables")
    assert restored.previous() == "tables"


def test_load_respects_max_size(tmp_path: Path) -> None:
    path = tmp_path / "history.txt"
    path.write_text("".join(f"SELECT {index}\n" for index in range(10)), encoding="utf-8")
    history = QueryHistory(max_size=3)

    history.load(path)

    assert history.entries == ("SELECT 7", "SELECT 8", "SELECT 9")


def test_load_missing_file_is_empty(tmp_path: Path) -> None:
    history = QueryHistory()

    history.load(tmp_path / "missing.txt")

    assert history.entries == ()
