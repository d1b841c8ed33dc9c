"""Filesystem helpers for locating items and persisting retry lists."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


def ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def discover_items(directory: Path, *, pattern: str = "*.json") -> list[str]:
    """Return the article files directly under ``directory``, sorted by name."""
    return sorted(str(path) for path in directory.glob(pattern) if path.is_file())


def read_item_list(path: Path, *, encoding: str = "utf-8") -> list[str]:
    """Read one identifier per line, trimming whitespace and skipping blanks."""
    items: list[str] = []
    with path.open("r", encoding=encoding) as fp:
        for line in fp:
            item = line.strip()
            if item:
                items.append(item)
    return items


def write_item_list(path: Path, items: Iterable[str], *, encoding: str = "utf-8") -> int:
    """Write identifiers one per line in the given order and return the count.

    The output is readable by :func:`read_item_list`, so a failure file can be
    fed back as a retry file.
    """
    ensure_parent(path)
    count = 0
    with path.open("w", encoding=encoding) as fp:
        for item in items:
            fp.write(f"{item}\n")
            count += 1
    return count
