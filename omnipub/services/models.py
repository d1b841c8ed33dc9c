"""Data structures shared by the upload services."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Mapping

_ARTICLE_KEYS = {
    "title": "title",
    "content": "content",
    "excerpt": "excerpt",
    "link": "link",
    "publish_date": "published_date",
    "updated_date": "updated_date",
}


@dataclass(frozen=True, slots=True)
class ArticleRecord:
    """One article as stored on disk. Every field is untrusted text."""

    title: str
    content: str
    link: str
    publish_date: str
    updated_date: str
    excerpt: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ArticleRecord":
        """Decode the on-disk JSON object; absent or null keys become ``""``."""
        values: dict[str, str] = {}
        for attr, key in _ARTICLE_KEYS.items():
            raw = data.get(key)
            if raw is None:
                values[attr] = ""
            elif isinstance(raw, str):
                values[attr] = raw
            else:
                raise TypeError(f"field '{key}' must be a string, got {type(raw).__name__}")
        return cls(**values)


@dataclass(frozen=True, slots=True)
class RenderedItem:
    html: str
    metadata: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Result of processing one item identifier."""

    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> "UploadOutcome":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "UploadOutcome":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True, slots=True)
class UploadJob:
    identifier: str
    collection_id: int | None = None


@dataclass(slots=True)
class RunSummary:
    """Counts and failed identifiers accumulated over one run.

    Counters and the failure list use separate locks so recording a success
    never waits on a failure append.
    """

    collect_failures: bool = False
    succeeded: int = 0
    failed: int = 0
    failures: list[str] = field(default_factory=list)
    _count_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _failure_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def record(self, identifier: str, outcome: UploadOutcome) -> None:
        with self._count_lock:
            if outcome.ok:
                self.succeeded += 1
            else:
                self.failed += 1
        if not outcome.ok and self.collect_failures:
            with self._failure_lock:
                self.failures.append(identifier)

    def failed_items(self) -> list[str]:
        with self._failure_lock:
            return list(self.failures)
