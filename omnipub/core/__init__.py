"""Core primitives for submitting items to Omnipub."""

from .cancellation import CancellationToken
from .http_client import OmnipubApiError, OmnipubClient
from .rate_limiter import RateLimiter

__all__ = [
    "CancellationToken",
    "OmnipubApiError",
    "OmnipubClient",
    "RateLimiter",
]
