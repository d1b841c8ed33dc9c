"""Run-wide cancellation shared by every worker."""

from __future__ import annotations

import threading
import time


class CancellationToken:
    """A cancel flag with an optional deadline.

    ``cancelled`` turns true either when :meth:`cancel` is called or once the
    deadline (seconds from construction) has passed.
    """

    def __init__(self, *, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._expires_at = time.monotonic() + deadline if deadline is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._expires_at is not None and time.monotonic() >= self._expires_at:
            self._event.set()
            return True
        return False

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` without one."""
        if self._expires_at is None:
            return None
        return max(self._expires_at - time.monotonic(), 0.0)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return ``True`` if cancelled meanwhile."""
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
            return self.cancelled
        return self._event.wait(seconds) or self.cancelled
