"""OpenAI-compatible LLM client adapter (Groq and OpenAI)."""

from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from chat_relay.adapters.llm.base import AbstractLLMClient
from chat_relay.core.errors import UpstreamConnectionError, UpstreamStatusError


def _error_body(exc: openai.APIStatusError) -> str:
    try:
        return exc.response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        return exc.message


def _retry_after(exc: openai.APIStatusError) -> float | None:
    """Upstream `retry-after` in seconds; HTTP-date values are ignored."""
    value = exc.response.headers.get("retry-after")
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _status_error(exc: openai.APIStatusError) -> UpstreamStatusError:
    return UpstreamStatusError(exc.status_code, _error_body(exc), retry_after=_retry_after(exc))


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI-compatible chat completions.

    Uses the official OpenAI Python SDK with async support. Groq is reached by
    pointing ``base_url`` at its OpenAI-compatible endpoint.

    SDK retries are disabled: the relay service owns the retry policy, and
    SDK exceptions are translated into adapter-level errors so callers never
    depend on ``openai`` types.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
        connect_timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the async client.

        Args:
            api_key: Bearer credential for the upstream API.
            model: Model identifier sent with every completion.
            base_url: Optional custom base URL (None uses the OpenAI default).
            timeout_seconds: Total timeout for a request in seconds.
            connect_timeout_seconds: Timeout for establishing the connection.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=connect_timeout_seconds),
            max_retries=0,
        )
        self.model = model

    async def create_chat_completion(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc
        except openai.APIConnectionError as exc:
            # Also covers APITimeoutError
            raise UpstreamConnectionError(f"{type(exc).__name__}: {exc}") from exc

        return response.model_dump(mode="json", exclude_unset=True)

    async def list_models(self) -> dict[str, Any]:
        try:
            page = await self.client.models.list()
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc
        except openai.APIConnectionError as exc:
            raise UpstreamConnectionError(f"{type(exc).__name__}: {exc}") from exc

        return {
            "object": "list",
            "data": [model.model_dump(mode="json", exclude_unset=True) for model in page.data],
        }
