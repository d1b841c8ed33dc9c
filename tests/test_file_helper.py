"""Tests for input discovery and retry-list persistence."""

from __future__ import annotations

from pathlib import Path

from omnipub.utils.file_helper import discover_items, read_item_list, write_item_list


def test_discover_items_returns_sorted_json_files(tmp_path: Path) -> None:
    for name in ("b.json", "a.json", "notes.txt"):
        (tmp_path / name).write_text("{}", encoding="utf-8")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "c.json").write_text("{}", encoding="utf-8")

    assert discover_items(tmp_path) == [str(tmp_path / "a.json"), str(tmp_path / "b.json")]


def test_discover_items_missing_directory_is_empty(tmp_path: Path) -> None:
    assert discover_items(tmp_path / "absent") == []


def test_read_item_list_trims_and_skips_blanks(tmp_path: Path) -> None:
    path = tmp_path / "retry.txt"
    path.write_text("  one.json \n\n\ttwo.json\n   \nthree.json", encoding="utf-8")
    assert read_item_list(path) == ["one.json", "two.json", "three.json"]


def test_written_list_reads_back_in_order(tmp_path: Path) -> None:
    path = tmp_path / "out" / "failed.txt"
    items = ["z.json", "a.json", "m.json"]

    assert write_item_list(path, items) == 3
    assert path.read_text(encoding="utf-8") == "z.json\na.json\nm.json\n"
    assert read_item_list(path) == items
