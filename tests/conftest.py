from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Callable

import pytest

from omnipub.settings.loader import CONFIG_ENV_VAR


class StubResponse:
    def __init__(
        self, status: int = 200, body: bytes = b"", *, chunks: list[bytes] | None = None
    ) -> None:
        self.status_code = status
        self._body = body
        self._chunks = chunks
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        if self._chunks is not None:
            # Chunked transfer: one HTTP chunk per iteration, whatever its size.
            yield from self._chunks
            return
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def close(self) -> None:
        self.closed = True


class StubSession:
    """Stands in for ``requests.Session``; records calls and tracks concurrency."""

    def __init__(
        self,
        responder: Callable[[str, dict[str, Any]], StubResponse] | None = None,
        *,
        delay: float = 0.0,
    ) -> None:
        self._responder = responder or (lambda url, kwargs: StubResponse(200))
        self._delay = delay
        self._lock = threading.Lock()
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.active = 0
        self.max_active = 0
        self.adapters: dict[str, Any] = {}
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> StubResponse:
        with self._lock:
            self.calls.append((url, kwargs))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self._delay:
                time.sleep(self._delay)
            return self._responder(url, kwargs)
        finally:
            with self._lock:
                self.active -= 1

    def close(self) -> None:
        self.closed = True


def sent_metadata(kwargs: dict[str, Any]) -> dict[str, Any]:
    return json.loads(kwargs["files"]["metadata"][1])


def write_article(directory: Path, name: str, **fields: Any) -> Path:
    payload = {
        "title": name,
        "content": f"<p>{name} body</p>",
        "excerpt": "",
        "link": f"https://example.org/{name}",
        "published_date": "2024-01-02",
        "updated_date": "2024-01-03",
    }
    payload.update(fields)
    path = directory / f"{name}.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
