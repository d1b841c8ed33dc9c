"""Security utilities package."""

from __future__ import annotations

from .credential_provider import EnvSecretProvider, SecretNotFoundError, SecretProvider

__all__ = [
    "EnvSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
]
