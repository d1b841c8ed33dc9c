"""Interfaces and basic implementations for secret resolution."""

from __future__ import annotations

from abc import ABC, abstractmethod
from os import environ
from typing import Mapping


class SecretNotFoundError(KeyError):
    """Raised when a secret cannot be resolved."""


class SecretProvider(ABC):
    """Abstract secret lookup contract."""

    @abstractmethod
    def get_secret(self, key: str) -> str:
        """Return the secret associated with ``key``."""


class EnvSecretProvider(SecretProvider):
    """Reads secrets from environment variables, looked up by exact name."""

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = env if env is not None else environ

    def get_secret(self, key: str) -> str:
        value = self._env.get(key, "")
        if not value.strip():
            raise SecretNotFoundError(key)
        return value.strip()


__all__ = [
    "EnvSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
]
