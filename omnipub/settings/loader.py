"""Helpers for loading configuration and static settings."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CONFIG_NAME = "omnipub.toml"
CONFIG_ENV_VAR = "OMNIPUB_CONFIG"
DEFAULT_API_BASE = "https://api.example.com/v2"
DEFAULT_KEY_ENV = "OMNIPUB_API_KEY"


class ConfigurationError(RuntimeError):
    """Raised when the run cannot start because of invalid configuration."""


@dataclass(slots=True)
class HttpSettings:
    timeout: float = 15.0
    idle_timeout: float = 90.0


@dataclass(slots=True)
class UploadSettings:
    api: str = DEFAULT_API_BASE
    collection: int = 0
    workers: int = 10
    backoff_ms: int = 0
    backoff_jitter_ms: int = 0
    max_conns: int = 256
    key_env: str = DEFAULT_KEY_ENV
    dir: Path = Path(".")
    retry: Path | None = None
    save_failures: Path | None = None
    deadline: float | None = None

    @property
    def collection_id(self) -> int | None:
        """Collection attached to every item, ``None`` when unset (0)."""
        return self.collection if self.collection > 0 else None

    def validate(self) -> None:
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1 (got {self.workers})")
        if self.max_conns < 1:
            raise ConfigurationError(f"max_conns must be >= 1 (got {self.max_conns})")
        if self.backoff_ms < 0 or self.backoff_jitter_ms < 0:
            raise ConfigurationError("backoff values must be non-negative")
        if self.collection < 0:
            raise ConfigurationError(f"collection must be >= 0 (got {self.collection})")
        if self.deadline is not None and self.deadline <= 0:
            raise ConfigurationError(f"deadline must be positive (got {self.deadline})")
        if not self.key_env:
            raise ConfigurationError("key_env must name an environment variable")


@dataclass(slots=True)
class AppConfig:
    upload: UploadSettings
    http: HttpSettings
    source: Path | None = None


_PATH_FIELDS = {"dir", "retry", "save_failures"}


def _config_path(explicit: str | os.PathLike[str] | None = None) -> Path | None:
    if explicit:
        return Path(explicit)
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value)
    # The implicit default file is optional; explicit ones must exist.
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate if candidate.exists() else None


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fp:
            return tomllib.load(fp)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {path}") from exc
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Unable to read config file {path}: {exc}") from exc


def _coerce(name: str, value: Any, default: Any) -> Any:
    if value is None:
        return None
    if name in _PATH_FIELDS:
        return Path(str(value))
    try:
        if name == "deadline":
            return float(value)
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for '{name}': {value!r}") from exc
    return str(value)


def _apply(settings: Any, values: Mapping[str, Any], *, section: str) -> Any:
    known = {field.name: getattr(settings, field.name) for field in fields(settings)}
    updates: dict[str, Any] = {}
    for key, value in values.items():
        if key not in known:
            raise ConfigurationError(f"Unknown option '{key}' in [{section}]")
        if value is None:
            continue
        updates[key] = _coerce(key, value, known[key])
    return replace(settings, **updates)


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the run configuration.

    Values come from built-in defaults, then the TOML file, then ``overrides``
    (typically command-line flags; ``None`` entries are ignored).
    """

    path = _config_path(config_path)
    data: dict[str, Any] = _load_toml(path) if path is not None else {}

    upload_section = data.get("upload", {})
    http_section = data.get("http", {})
    if not isinstance(upload_section, dict) or not isinstance(http_section, dict):
        raise ConfigurationError("[upload] and [http] must be tables")

    upload = _apply(UploadSettings(), upload_section, section="upload")
    if overrides:
        upload = _apply(upload, overrides, section="cli")
    http = _apply(HttpSettings(), http_section, section="http")

    upload.validate()
    if http.timeout <= 0 or http.idle_timeout <= 0:
        raise ConfigurationError("http timeouts must be positive")

    return AppConfig(upload=upload, http=http, source=path)
