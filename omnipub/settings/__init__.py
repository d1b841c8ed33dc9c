"""Settings package exports."""

from .loader import (
    AppConfig,
    ConfigurationError,
    HttpSettings,
    UploadSettings,
    load_config,
)

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "HttpSettings",
    "UploadSettings",
    "load_config",
]
