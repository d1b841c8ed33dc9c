"""Command-line interface for bulk uploading article files to Omnipub."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Sequence

from ..core import CancellationToken, OmnipubClient, RateLimiter
from ..services.coordinator import UploadCoordinator
from ..services.item_processor import ItemProcessor
from ..services.models import RunSummary
from ..settings import AppConfig, ConfigurationError, load_config
from ..utils.file_helper import discover_items, read_item_list, write_item_list
from ..utils.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# argparse dest -> UploadSettings field
_OVERRIDES = {
    "dir": "dir",
    "retry": "retry",
    "api": "api",
    "collection": "collection",
    "workers": "workers",
    "backoff": "backoff_ms",
    "max_conns": "max_conns",
    "key_env": "key_env",
    "save_failures": "save_failures",
    "deadline": "deadline",
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, structured=not args.log_plain)

    try:
        config = load_config(args.config, overrides=_overrides(args))
        client = OmnipubClient.from_env(
            config.upload.api,
            config.upload.key_env,
            max_conns=config.upload.max_conns,
            http_settings=config.http,
        )
        items = _collect_items(config)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc, extra={"event": "cli.error"})
        raise SystemExit(2) from exc

    try:
        summary = _run(config, client, items)
    finally:
        client.close()

    _save_failures(config, summary)
    print(f"Done. Success: {summary.succeeded}  Failure: {summary.failed}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omnipub-upload",
        description="Render article JSON files and upload them to the Omnipub API",
    )
    parser.add_argument("--config", help="Path to a TOML configuration file", default=None)
    parser.add_argument("--dir", type=Path, help="Directory with .json files (default: .)")
    parser.add_argument("--retry", type=Path, help="File with list of failed files to retry")
    parser.add_argument("--api", help="Omnipub API base URL")
    parser.add_argument("--collection", type=int, help="Optional collection_id (0 = none)")
    parser.add_argument("--workers", type=int, help="Concurrent workers (default: 10)")
    parser.add_argument(
        "--backoff",
        type=int,
        metavar="MS",
        help="Delay in milliseconds before each submission, per worker (default: 0)",
    )
    parser.add_argument(
        "--max-conns",
        dest="max_conns",
        type=int,
        help="Max connections per host (default: 256)",
    )
    parser.add_argument(
        "--key-env",
        dest="key_env",
        help="Environment variable holding the API key (default: OMNIPUB_API_KEY)",
    )
    parser.add_argument(
        "--save-failures",
        dest="save_failures",
        type=Path,
        help="Save paths of failed files to this file",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        metavar="SECONDS",
        help="Cancel outstanding uploads after this many seconds",
    )
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default="INFO",
        help="Root log level (default: INFO)",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {field: getattr(args, dest) for dest, field in _OVERRIDES.items()}


def _collect_items(config: AppConfig) -> list[str]:
    retry = config.upload.retry
    if retry is not None:
        try:
            return read_item_list(retry)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Error reading retry file {retry}: {exc}") from exc
    return discover_items(config.upload.dir)


def _run(config: AppConfig, client: OmnipubClient, items: list[str]) -> RunSummary:
    settings = config.upload
    if not items:
        LOGGER.info("No files to process - nothing to upload.", extra={"event": "upload.empty"})
        return RunSummary()

    coordinator = UploadCoordinator(
        ItemProcessor(client),
        workers=settings.workers,
        pacer=RateLimiter.from_millis(settings.backoff_ms, settings.backoff_jitter_ms),
        collect_failures=settings.save_failures is not None,
        cancel=CancellationToken(deadline=settings.deadline),
    )
    summary = coordinator.run(items, settings.collection_id)
    LOGGER.info(
        "Upload finished: %d of %d succeeded",
        summary.succeeded,
        summary.total,
        extra={"event": "upload.finished", "succeeded": summary.succeeded, "failed": summary.failed},
    )
    return summary


def _save_failures(config: AppConfig, summary: RunSummary) -> None:
    target = config.upload.save_failures
    failures = summary.failed_items()
    if target is None or not failures:
        return
    try:
        count = write_item_list(target, failures)
    except OSError as exc:
        LOGGER.error(
            "Error saving failures file: %s",
            exc,
            extra={"event": "upload.failures_save_failed", "path": str(target)},
        )
        return
    LOGGER.info(
        "Saved %d failed paths to %s",
        count,
        target,
        extra={"event": "upload.failures_saved", "path": str(target), "count": count},
    )


__all__ = ["main"]
