"""Chat relay service: forwards admitted chat requests to the upstream LLM API.

This service is the glue between the HTTP layer and the upstream adapter. It
handles:
- Credential and input validation
- Upstream request construction from fixed generation parameters
- A single retry with fixed backoff on transient I/O failure
- Mapping upstream error statuses to caller-facing error categories
- Response shaping (raw passthrough or extracted text)

Admission (rate limiting) happens before this service is reached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from chat_relay.adapters.llm.base import AbstractLLMClient
from chat_relay.core.config import LLMSettings
from chat_relay.core.errors import (
    ConfigurationAppError,
    ErrorDetails,
    LLMAppError,
    UpstreamAuthAppError,
    UpstreamConnectionError,
    UpstreamModelAppError,
    UpstreamRateLimitAppError,
    UpstreamStatusError,
    UpstreamUnavailableAppError,
    ValidationAppError,
)

logger = logging.getLogger(__name__)

EXTRACTION_PLACEHOLDER = "No response text was returned by the model."

# Upstream error bodies are echoed in messages; cap them to keep responses small.
_MAX_BODY_CHARS = 2000


def extract_text(payload: dict[str, Any]) -> str:
    """Pull the first choice's message text out of a chat completion payload.

    Best effort: any unexpected shape yields the placeholder instead of an error.

    Examples:
        >>> extract_text({"choices": [{"message": {"content": "hi"}}]})
        'hi'
        >>> extract_text({"choices": []}) == EXTRACTION_PLACEHOLDER
        True
    """
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        logger.warning(
            "relay.text_extraction_failed",
            extra={"payload_type": type(payload).__name__},
        )
        return EXTRACTION_PLACEHOLDER

    if not isinstance(content, str) or not content.strip():
        logger.warning("relay.text_extraction_empty")
        return EXTRACTION_PLACEHOLDER
    return content


class RelayService:
    """Relays chat and model-listing requests to the configured upstream."""

    def __init__(
        self,
        llm: AbstractLLMClient | None,
        llm_settings: LLMSettings,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the relay.

        Args:
            llm: Upstream client, or None when no credential is configured.
            llm_settings: Generation parameters, retry policy and response mode.
            sleep: Awaitable used for the retry backoff (replaceable in tests).
        """
        self._llm = llm
        self._settings = llm_settings
        self._sleep = sleep

    @property
    def provider(self) -> str:
        return self._settings.provider

    def _require_client(self) -> AbstractLLMClient:
        if self._llm is None:
            raise ConfigurationAppError(
                code="llm_missing_api_key",
                message=f"Missing API key for provider '{self.provider}'. Set LLM_API_KEY.",
                details={"provider": self.provider},
            )
        return self._llm

    async def chat(self, messages: list[dict[str, str]] | None) -> dict[str, Any]:
        """Forward a conversation to the upstream model.

        Args:
            messages: Ordered chat messages with "role" and "content".

        Returns:
            The upstream payload (raw mode) or ``{"response": text}`` (extracted mode).

        Raises:
            ConfigurationAppError: No upstream credential configured.
            ValidationAppError: ``messages`` missing or empty.
            LLMAppError: Upstream failure, as a subclass carrying the mapped status.
        """
        llm = self._require_client()

        if not messages:
            raise ValidationAppError(
                code="messages_required",
                message="messages array required",
            )

        payload = await self._call_upstream(
            "chat_completion",
            lambda: llm.create_chat_completion(
                messages,
                max_tokens=self._settings.max_tokens,
                temperature=self._settings.temperature,
            ),
        )

        if self._settings.response_mode == "extracted":
            return {"response": extract_text(payload)}
        return payload

    async def list_models(self) -> dict[str, Any]:
        """Relay the upstream "list models" query."""
        llm = self._require_client()
        return await self._call_upstream("list_models", llm.list_models)

    async def _call_upstream(
        self,
        operation: str,
        call: Callable[[], Awaitable[dict[str, Any]]],
    ) -> dict[str, Any]:
        max_attempts = 1 + self._settings.retry_attempts
        attempt = 0
        while True:
            attempt += 1
            try:
                result = await call()
            except UpstreamConnectionError as exc:
                logger.warning(
                    "relay.upstream_io_error",
                    extra={
                        "operation": operation,
                        "provider": self.provider,
                        "attempt": attempt,
                        "error_msg": str(exc),
                    },
                )
                if attempt >= max_attempts:
                    raise UpstreamUnavailableAppError(
                        code="upstream_unavailable",
                        message=f"Upstream {self.provider} I/O error: {exc}",
                        details={"provider": self.provider, "attempts": attempt},
                    ) from exc
                await self._sleep(self._settings.retry_backoff_seconds)
                continue
            except UpstreamStatusError as exc:
                logger.warning(
                    "relay.upstream_error_status",
                    extra={
                        "operation": operation,
                        "provider": self.provider,
                        "upstream_status": exc.status_code,
                        "attempt": attempt,
                    },
                )
                raise self._map_status_error(exc) from exc

            logger.info(
                "relay.upstream_response",
                extra={
                    "operation": operation,
                    "provider": self.provider,
                    "model": self._settings.model,
                    "attempt": attempt,
                },
            )
            return result

    def _map_status_error(self, exc: UpstreamStatusError) -> LLMAppError:
        """Translate an upstream error status into the caller-facing category."""
        status = exc.status_code
        body = (exc.body or "")[:_MAX_BODY_CHARS]
        provider = self.provider
        details: ErrorDetails = {"provider": provider, "upstream_status": status}

        if status in (401, 403):
            return UpstreamAuthAppError(
                code="upstream_auth_error",
                message=f"{provider} API auth error: {body}",
                details=details,
            )
        if status == 429:
            if exc.retry_after is not None:
                details["retry_after"] = exc.retry_after
            return UpstreamRateLimitAppError(
                code="upstream_rate_limited",
                message=f"{provider} quota/limit error: {body}",
                details=details,
            )
        if status == 404 and "model" in body:
            return UpstreamModelAppError(
                code="upstream_model_error",
                message=f"{provider} model error: {body}",
                details={**details, "model": self._settings.model},
            )
        return LLMAppError(
            code="upstream_error",
            message=f"{provider} API error: {body}",
            details=details,
        )
