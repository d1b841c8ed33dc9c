"""Bounded worker pool that drains the upload queue."""

from __future__ import annotations

import queue
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Protocol, Sequence

from ..core.cancellation import CancellationToken
from ..core.rate_limiter import RateLimiter
from ..utils.logging import get_logger
from .models import RunSummary, UploadJob, UploadOutcome

LOGGER = get_logger(__name__)


class Processor(Protocol):
    def process(
        self,
        identifier: str,
        collection_id: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> UploadOutcome:
        """Process one identifier and return its outcome."""


class UploadCoordinator:
    """Runs ``workers`` threads over a queue holding every identifier once.

    The queue is filled completely before the first worker starts and never
    written to afterwards, so an empty queue means the work is drained.
    """

    def __init__(
        self,
        processor: Processor,
        *,
        workers: int = 10,
        pacer: RateLimiter | None = None,
        collect_failures: bool = False,
        cancel: CancellationToken | None = None,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1 (got {workers})")
        self._processor = processor
        self._workers = workers
        self._pacer = pacer
        self._collect_failures = collect_failures
        self._cancel = cancel or CancellationToken()

    def run(self, identifiers: Sequence[str], collection_id: int | None = None) -> RunSummary:
        summary = RunSummary(collect_failures=self._collect_failures)
        if not identifiers:
            return summary

        jobs: queue.Queue[UploadJob] = queue.Queue(maxsize=len(identifiers))
        for identifier in identifiers:
            jobs.put_nowait(UploadJob(identifier=identifier, collection_id=collection_id))

        LOGGER.info(
            "Uploading %d files with %d workers",
            len(identifiers),
            self._workers,
            extra={"event": "upload.start", "items": len(identifiers), "workers": self._workers},
        )

        with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="upload") as executor:
            futures = [executor.submit(self._work, jobs, summary) for _ in range(self._workers)]
            self._drain(futures)
            for future in futures:
                # Workers catch per-item errors; anything here is a bug in the loop itself.
                future.result()
        return summary

    def _drain(self, futures: list[Future[None]]) -> None:
        while True:
            try:
                wait(futures)
                return
            except KeyboardInterrupt:
                LOGGER.warning(
                    "Interrupted; cancelling remaining uploads",
                    extra={"event": "upload.cancelled"},
                )
                self._cancel.cancel()

    def _work(self, jobs: queue.Queue[UploadJob], summary: RunSummary) -> None:
        while True:
            try:
                job = jobs.get_nowait()
            except queue.Empty:
                return
            if self._pacer is not None and self._pacer.enabled and not self._cancel.cancelled:
                self._pacer.sleep(self._cancel)
            try:
                outcome = self._processor.process(job.identifier, job.collection_id, self._cancel)
            except Exception as exc:
                LOGGER.exception(
                    "Processor raised for %s",
                    job.identifier,
                    extra={"event": "upload.item_failed", "item": job.identifier},
                )
                outcome = UploadOutcome.failure(f"{type(exc).__name__}: {exc}")
            summary.record(job.identifier, outcome)
