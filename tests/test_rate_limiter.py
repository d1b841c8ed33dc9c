"""Tests for pacing and cancellation primitives."""

from __future__ import annotations

import time

from omnipub.core.cancellation import CancellationToken
from omnipub.core.rate_limiter import RateLimiter


def test_from_millis_converts_to_seconds() -> None:
    limiter = RateLimiter.from_millis(250)
    assert limiter.enabled
    assert limiter.compute_delay() == 0.25


def test_jitter_stays_within_bounds() -> None:
    limiter = RateLimiter.from_millis(100, 50)
    for _ in range(20):
        assert 0.1 <= limiter.compute_delay() <= 0.15


def test_zero_backoff_is_disabled() -> None:
    limiter = RateLimiter.from_millis(0)
    assert not limiter.enabled
    assert limiter.sleep() == 0.0


def test_sleep_returns_early_when_cancelled() -> None:
    token = CancellationToken()
    token.cancel()
    started = time.monotonic()
    RateLimiter(min_delay=5.0).sleep(token)
    assert time.monotonic() - started < 1.0


def test_deadline_cancels_token() -> None:
    token = CancellationToken(deadline=0.01)
    time.sleep(0.05)
    assert token.cancelled
    assert token.wait(1.0)
    assert token.remaining() == 0.0


def test_token_without_deadline() -> None:
    token = CancellationToken()
    assert token.remaining() is None
    assert not token.wait(0.0)
    token.cancel()
    assert token.cancelled
