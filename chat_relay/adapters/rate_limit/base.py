"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
in-memory bucket can be replaced by another store without touching routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Point-in-time view of the limiter, used for response headers.

    Attributes:
        limit: Maximum admissions per refill interval.
        remaining: Tokens left right now.
        reset_after_seconds: Seconds until the next full refill becomes due.
    """

    limit: int
    remaining: int
    reset_after_seconds: int


class AbstractRateLimiter(ABC):
    """Interface for admission gates shared by all callers."""

    @abstractmethod
    def try_consume(self) -> bool:
        """Try to take one unit of budget.

        Returns:
            True when admitted, False when the budget is exhausted. Never raises
            and never waits for budget to become available.
        """
        raise NotImplementedError

    @abstractmethod
    def snapshot(self) -> RateLimitSnapshot:
        """Return the current state without consuming anything."""
        raise NotImplementedError
