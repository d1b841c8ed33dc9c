"""Load, render and submit a single article file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from ..core.cancellation import CancellationToken
from ..utils.logging import get_logger
from .models import ArticleRecord, RenderedItem, UploadOutcome
from .renderer import render

LOGGER = get_logger(__name__)


class ItemLoadError(RuntimeError):
    """Raised when an item cannot be read or decoded into an article."""


class Submitter(Protocol):
    """Sends a rendered item to the remote endpoint."""

    def submit(
        self,
        html_content: str,
        metadata: Mapping[str, Any],
        collection_id: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> UploadOutcome:
        """Submit the item and classify the outcome."""


def load_article(identifier: str) -> ArticleRecord:
    """Read the JSON file named by ``identifier``."""
    path = Path(identifier)
    try:
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
    except OSError as exc:
        raise ItemLoadError(f"cannot read {identifier}: {exc}") from exc
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ItemLoadError(f"cannot decode {identifier}: {exc}") from exc
    if not isinstance(data, dict):
        raise ItemLoadError(f"cannot decode {identifier}: expected a JSON object")
    try:
        return ArticleRecord.from_dict(data)
    except TypeError as exc:
        raise ItemLoadError(f"cannot decode {identifier}: {exc}") from exc


class ItemProcessor:
    """Runs load -> render -> submit for one identifier.

    Every failure, expected or not, is returned as an :class:`UploadOutcome`
    so a bad item never escapes into the worker loop.
    """

    def __init__(
        self,
        submitter: Submitter,
        *,
        loader: Callable[[str], ArticleRecord] = load_article,
        renderer: Callable[[ArticleRecord], RenderedItem] = render,
    ) -> None:
        self._submitter = submitter
        self._loader = loader
        self._renderer = renderer

    def process(
        self,
        identifier: str,
        collection_id: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> UploadOutcome:
        outcome = self._process(identifier, collection_id, cancel)
        if not outcome.ok:
            LOGGER.warning(
                "FAIL  %s -> %s",
                identifier,
                outcome.reason,
                extra={"event": "upload.item_failed", "item": identifier, "reason": outcome.reason},
            )
        return outcome

    def _process(
        self,
        identifier: str,
        collection_id: int | None,
        cancel: CancellationToken | None,
    ) -> UploadOutcome:
        if cancel is not None and cancel.cancelled:
            return UploadOutcome.failure("cancelled before start")
        try:
            article = self._loader(identifier)
            rendered = self._renderer(article)
            return self._submitter.submit(rendered.html, rendered.metadata, collection_id, cancel)
        except ItemLoadError as exc:
            return UploadOutcome.failure(str(exc))
        except Exception as exc:
            LOGGER.debug("Unexpected error processing %s", identifier, exc_info=True)
            return UploadOutcome.failure(f"{type(exc).__name__}: {exc}")
