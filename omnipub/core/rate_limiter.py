"""Per-worker pacing applied before each submission."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass

from .cancellation import CancellationToken


@dataclass(slots=True)
class RateLimiter:
    """Fixed delay with optional random jitter, in seconds.

    Each worker calls :meth:`sleep` independently, so the aggregate request
    rate still grows with the number of workers.
    """

    min_delay: float = 0.0
    max_delay: float = 0.0

    def __post_init__(self) -> None:
        if self.max_delay < self.min_delay:
            self.max_delay = self.min_delay

    @classmethod
    def from_millis(cls, backoff_ms: int, jitter_ms: int = 0) -> "RateLimiter":
        delay = max(backoff_ms, 0) / 1000.0
        return cls(min_delay=delay, max_delay=delay + max(jitter_ms, 0) / 1000.0)

    @property
    def enabled(self) -> bool:
        return self.max_delay > 0

    def compute_delay(self) -> float:
        low = max(self.min_delay, 0.0)
        high = max(self.max_delay, low)
        if high == low:
            return low
        return random.uniform(low, high)

    def sleep(self, cancel: CancellationToken | None = None) -> float:
        """Wait one pacing interval; returns early if ``cancel`` fires."""
        delay = self.compute_delay()
        if delay <= 0:
            return 0.0
        if cancel is None:
            time.sleep(delay)
        else:
            cancel.wait(delay)
        return delay
