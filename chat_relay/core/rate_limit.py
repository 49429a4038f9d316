"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Explicit ownership: the limiter is built once by the application factory
  and stored on ``app.state``; nothing here holds module-level state.

Rate limiting strategy:
- One token bucket for the whole process; all callers share its budget.
- The bucket snaps back to full once the refill interval has elapsed.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from chat_relay.adapters.rate_limit.base import AbstractRateLimiter
from chat_relay.adapters.rate_limit.token_bucket import TokenBucketRateLimiter
from chat_relay.core.config import AppSettings

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter:
    """Construct the process-wide limiter from settings."""
    return TokenBucketRateLimiter(
        capacity=app_settings.rate_limit_capacity,
        refill_interval_seconds=app_settings.rate_limit_refill_interval_seconds,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""
    return request.app.state.rate_limiter


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings.app


async def enforce_rate_limit(
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
    app_settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> None:
    """FastAPI dependency enforcing the shared request quota.

    When enabled, consumes one token. If the bucket is empty, raises HTTP 429.

    Raises:
        HTTPException: 429 Too Many Requests when the quota is exhausted.
    """

    if not app_settings.rate_limit_enabled:
        return

    if limiter.try_consume():
        logger.debug("rate_limit.allowed")
        return

    snapshot = limiter.snapshot()
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "limit": snapshot.limit,
            "remaining": snapshot.remaining,
            "retry_after_s": snapshot.reset_after_seconds,
        },
    )

    headers: dict[str, str] = {}
    if app_settings.rate_limit_include_headers:
        headers["Retry-After"] = str(snapshot.reset_after_seconds)
        headers["X-RateLimit-Limit"] = str(snapshot.limit)
        headers["X-RateLimit-Remaining"] = str(snapshot.remaining)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests - slow down.",
        headers=headers or None,
    )
