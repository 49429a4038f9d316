"""In-memory token bucket with periodic full reset.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- The bucket does not trickle tokens back. Once ``refill_interval_seconds``
  have elapsed since the last reset, the next call snaps it back to full
  capacity, so a full burst is admitted right after every reset.
- Thread-safe: the refill check-and-reset is serialized by one lock and the
  decrement is a compare-and-set retry loop over a second, short-held lock.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from chat_relay.adapters.rate_limit.base import AbstractRateLimiter, RateLimitSnapshot


class TokenBucketRateLimiter(AbstractRateLimiter):
    """Process-wide admission gate shared by all callers.

    Example:
        >>> limiter = TokenBucketRateLimiter(capacity=2, refill_interval_seconds=60)
        >>> limiter.try_consume(), limiter.try_consume(), limiter.try_consume()
        (True, True, False)
    """

    def __init__(
        self,
        *,
        capacity: int,
        refill_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize a full bucket.

        Args:
            capacity: Maximum number of tokens held at any time.
            refill_interval_seconds: Period after which the bucket resets to full.
            clock: Time source returning seconds; monotonic by default.

        Raises:
            ValueError: If capacity or refill_interval_seconds are invalid.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if refill_interval_seconds <= 0:
            raise ValueError("refill_interval_seconds must be > 0")

        self._capacity = capacity
        self._refill_interval = refill_interval_seconds
        self._clock = clock
        self._tokens = capacity
        self._last_refill = clock()
        self._refill_lock = threading.Lock()
        self._counter_lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def refill_interval_seconds(self) -> float:
        return self._refill_interval

    @property
    def available_tokens(self) -> int:
        return self._tokens

    def _compare_and_set(self, expected: int, new: int) -> bool:
        """Replace the token count with ``new`` only if it still equals ``expected``."""
        with self._counter_lock:
            if self._tokens != expected:
                return False
            self._tokens = new
            return True

    def _refill_if_due(self) -> None:
        with self._refill_lock:
            now = self._clock()
            if now - self._last_refill >= self._refill_interval:
                with self._counter_lock:
                    self._tokens = self._capacity
                self._last_refill = now

    def try_consume(self) -> bool:
        """Take one token if any is left.

        Returns:
            True when a token was granted, False when the bucket is empty.
        """
        self._refill_if_due()
        while True:
            current = self._tokens
            if current <= 0:
                return False
            if self._compare_and_set(current, current - 1):
                return True

    def snapshot(self) -> RateLimitSnapshot:
        with self._refill_lock:
            elapsed = self._clock() - self._last_refill
        reset_after = max(0, int(math.ceil(self._refill_interval - elapsed)))
        return RateLimitSnapshot(
            limit=self._capacity,
            remaining=self._tokens,
            reset_after_seconds=reset_after,
        )
