"""Retry policy for optimistic-concurrency loops."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from kvindex.config.models import RetryConfig


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently to re-run a lost compare-and-swap.

    ``max_attempts=None`` retries until the write lands.
    """

    max_attempts: int | None = None
    base_delay: float = 0.0
    max_delay: float = 0.1
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    @classmethod
    def from_config(cls, config: RetryConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay_sec,
            max_delay=config.max_delay_sec,
        )

    def attempts(self) -> Iterator[int]:
        """Yield attempt numbers starting at 1, backing off between them."""
        attempt = 1
        while self.max_attempts is None or attempt <= self.max_attempts:
            if attempt > 1:
                delay = self.delay(attempt - 1)
                if delay > 0:
                    self.sleep(delay)
            yield attempt
            attempt += 1

    def delay(self, conflicts: int) -> float:
        """Backoff after the given number of lost races."""
        if self.base_delay <= 0:
            return 0.0
        return min(self.base_delay * (2 ** (conflicts - 1)), self.max_delay)
