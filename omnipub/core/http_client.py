"""Omnipub HTTP client: multipart submission over a bounded connection pool."""

from __future__ import annotations

import json
import threading
import time
from typing import Any, Mapping

import requests
from requests.adapters import HTTPAdapter

from ..security import EnvSecretProvider, SecretNotFoundError, SecretProvider
from ..services.models import UploadOutcome
from ..settings import ConfigurationError, HttpSettings
from ..utils.logging import get_logger
from .cancellation import CancellationToken

_LOGGER = get_logger(__name__)
_ENDPOINT = "/omnipub"
MAX_ERROR_BODY = 4096


class OmnipubApiError(RuntimeError):
    """Raised when a submission fails in transport or is rejected remotely."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    @property
    def status(self) -> int | None:
        return self.details.get("status")

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


def encode_metadata(metadata: Mapping[str, Any]) -> str:
    return json.dumps(metadata, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def build_session(max_conns: int) -> requests.Session:
    """Create a session whose pool holds at most ``max_conns`` connections per host.

    ``pool_block`` makes callers wait for a free connection instead of opening
    extra ones; adapter retries stay off.
    """

    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=max_conns,
        pool_maxsize=max_conns,
        pool_block=True,
        max_retries=0,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class OmnipubClient:
    """Submits rendered items to ``POST {api_base}/omnipub``.

    The instance is shared by every worker thread. Its headers and settings
    are fixed after construction; each request works on a copy of the
    default headers.
    """

    def __init__(
        self,
        api_base: str,
        credential: str,
        *,
        max_conns: int = 256,
        http_settings: HttpSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not credential:
            raise ConfigurationError("an API credential is required")
        settings = http_settings or HttpSettings()
        self._api_base = api_base.rstrip("/")
        self._default_headers = {"Authorization": f"Bearer {credential}"}
        self._timeout = settings.timeout
        self._idle_timeout = settings.idle_timeout
        self._session = session if session is not None else build_session(max_conns)
        self._slots = threading.BoundedSemaphore(max_conns)
        self._idle_lock = threading.Lock()
        self._in_flight = 0
        self._last_active = time.monotonic()

    @classmethod
    def from_env(
        cls,
        api_base: str,
        key_env: str,
        *,
        max_conns: int = 256,
        http_settings: HttpSettings | None = None,
        secrets: SecretProvider | None = None,
        session: requests.Session | None = None,
    ) -> "OmnipubClient":
        """Resolve the bearer credential from ``key_env`` or fail fast."""
        provider = secrets or EnvSecretProvider()
        try:
            credential = provider.get_secret(key_env)
        except SecretNotFoundError as exc:
            raise ConfigurationError(f"env {key_env!r} not set") from exc
        return cls(
            api_base,
            credential,
            max_conns=max_conns,
            http_settings=http_settings,
            session=session,
        )

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}{_ENDPOINT}"

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    def close(self) -> None:
        self._session.close()

    def submit(
        self,
        html_content: str,
        metadata: Mapping[str, Any],
        collection_id: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> UploadOutcome:
        """Post one item and classify the result; never raises for HTTP failures."""
        try:
            self.post_item(html_content, metadata, collection_id, cancel)
        except OmnipubApiError as exc:
            return UploadOutcome.failure(exc.args[0])
        return UploadOutcome.success()

    def post_item(
        self,
        html_content: str,
        metadata: Mapping[str, Any],
        collection_id: int | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        fields: dict[str, tuple[None, str]] = {
            "html_content": (None, html_content),
            "metadata": (None, encode_metadata(metadata)),
        }
        if collection_id is not None:
            fields["collection_id"] = (None, str(int(collection_id)))

        timeout = self._timeout
        if cancel is not None:
            if cancel.cancelled:
                raise OmnipubApiError("request cancelled", details={"reason": "cancelled"})
            remaining = cancel.remaining()
            if remaining is not None:
                timeout = max(min(timeout, remaining), 0.001)

        with self._slots:
            self._enter()
            try:
                status, body = self._send(fields, timeout)
            finally:
                self._leave()

        if 200 <= status < 300:
            return
        raise OmnipubApiError(f"http {status} {body}".rstrip(), details={"status": status})

    def _send(self, fields: Mapping[str, tuple[None, str]], timeout: float) -> tuple[int, str]:
        try:
            response = self._session.post(
                self.endpoint,
                headers=dict(self._default_headers),
                files=fields,
                timeout=timeout,
                stream=True,
            )
        except requests.RequestException as exc:
            raise OmnipubApiError(str(exc), details={"reason": type(exc).__name__}) from exc
        try:
            if 200 <= response.status_code < 300:
                return response.status_code, ""
            return response.status_code, self._read_error_body(response)
        finally:
            response.close()

    def _read_error_body(self, response: requests.Response) -> str:
        raw = bytearray()
        try:
            for chunk in response.iter_content(MAX_ERROR_BODY):
                raw.extend(chunk)
                if len(raw) >= MAX_ERROR_BODY:
                    break
        except (OSError, requests.RequestException) as exc:
            _LOGGER.debug("Unable to read error body: %s", exc)
        return bytes(raw[:MAX_ERROR_BODY]).decode("utf-8", errors="replace").strip()

    def _enter(self) -> None:
        with self._idle_lock:
            idle_for = time.monotonic() - self._last_active
            if self._in_flight == 0 and idle_for > self._idle_timeout:
                # Connections idle past idle_timeout are never reused.
                for adapter in self._session.adapters.values():
                    adapter.close()
                _LOGGER.debug("Dropped idle connections after %.0fs", idle_for)
            self._in_flight += 1

    def _leave(self) -> None:
        with self._idle_lock:
            self._in_flight -= 1
            self._last_active = time.monotonic()


__all__ = ["OmnipubApiError", "OmnipubClient", "build_session", "encode_metadata"]
