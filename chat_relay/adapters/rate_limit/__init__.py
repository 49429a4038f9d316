"""Rate limiting adapters.

A single in-memory token bucket gates every chat request in the process.
Multiple workers each hold their own bucket.
"""

from chat_relay.adapters.rate_limit.base import AbstractRateLimiter, RateLimitSnapshot
from chat_relay.adapters.rate_limit.token_bucket import TokenBucketRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RateLimitSnapshot",
    "TokenBucketRateLimiter",
]
