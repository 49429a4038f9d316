"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.

Each caller-facing error carries the HTTP status it is rendered with, so the
exception handlers never need to know about individual upstream conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    http_status: int
    upstream_status: int
    retry_after: float
    attempts: int
    provider: str
    model: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input validation fails."""


class ConfigurationAppError(AppError):
    """Raised when server-side configuration (e.g. the upstream credential) is missing."""

    status_code: ClassVar[int] = 401


class LLMAppError(AppError):
    """Raised when the upstream LLM call fails for a reason without a dedicated mapping."""

    status_code: ClassVar[int] = 500


class UpstreamAuthAppError(LLMAppError):
    """Upstream rejected our credential (401/403)."""

    status_code: ClassVar[int] = 401


class UpstreamRateLimitAppError(LLMAppError):
    """Upstream quota or rate limit reached (429)."""

    status_code: ClassVar[int] = 429


class UpstreamModelAppError(LLMAppError):
    """Upstream does not know the configured model (404 mentioning the model)."""

    status_code: ClassVar[int] = 400


class UpstreamUnavailableAppError(LLMAppError):
    """Upstream could not be reached after the allowed retries."""

    status_code: ClassVar[int] = 502


class UpstreamStatusError(Exception):
    """Adapter-level error: the upstream answered with an HTTP error status."""

    def __init__(self, status_code: int, body: str, retry_after: float | None = None) -> None:
        super().__init__(f"upstream returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body
        self.retry_after = retry_after


class UpstreamConnectionError(Exception):
    """Adapter-level error: transient I/O failure (connect error, timeout, EOF)."""
