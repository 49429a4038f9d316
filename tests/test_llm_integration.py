"""Integration tests for the LLM adapter layer."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest
from openai.types import Model
from openai.types.chat import ChatCompletion

from chat_relay.adapters.llm import OpenAIClient, create_llm_client
from chat_relay.core.config import GROQ_BASE_URL, LLMSettings
from chat_relay.core.errors import (
    ConfigurationAppError,
    UpstreamConnectionError,
    UpstreamStatusError,
)

CHAT_URL = f"{GROQ_BASE_URL}/chat/completions"
MESSAGES = [{"role": "user", "content": "Hi"}]


def _status_error(
    cls: type, status: int, text: str, headers: dict[str, str] | None = None
) -> openai.APIStatusError:
    response = httpx.Response(
        status, request=httpx.Request("POST", CHAT_URL), text=text, headers=headers
    )
    return cls(f"Error code: {status}", response=response, body=None)


@pytest.fixture
def client() -> OpenAIClient:
    return OpenAIClient(api_key="test-key-123", model="test-model", base_url=GROQ_BASE_URL)


class TestOpenAIClient:
    """OpenAI-compatible client with mocked SDK calls."""

    def test_sdk_retries_are_disabled(self, client: OpenAIClient) -> None:
        assert client.client.max_retries == 0
        assert str(client.client.base_url).startswith(GROQ_BASE_URL)

    @pytest.mark.asyncio
    async def test_chat_completion_success(
        self, client: OpenAIClient, sample_completion: dict
    ) -> None:
        completion = ChatCompletion.model_validate(sample_completion)

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=completion,
        ) as mock_create:
            result = await client.create_chat_completion(
                MESSAGES, max_tokens=400, temperature=0.2
            )

        assert result["id"] == "chatcmpl-123"
        assert result["choices"][0]["message"]["content"] == "Hello from the model"
        assert result["usage"]["total_tokens"] == 9

        call_kwargs = mock_create.call_args.kwargs
        assert call_kwargs["model"] == "test-model"
        assert call_kwargs["messages"] == MESSAGES
        assert call_kwargs["max_tokens"] == 400
        assert call_kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error_cls", "status"),
        [
            (openai.AuthenticationError, 401),
            (openai.PermissionDeniedError, 403),
            (openai.NotFoundError, 404),
            (openai.RateLimitError, 429),
            (openai.InternalServerError, 503),
        ],
    )
    async def test_status_errors_are_translated(
        self, client: OpenAIClient, error_cls: type, status: int
    ) -> None:
        error = _status_error(error_cls, status, '{"error": {"message": "upstream says no"}}')

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            with pytest.raises(UpstreamStatusError) as exc:
                await client.create_chat_completion(MESSAGES, max_tokens=10, temperature=0.0)

        assert exc.value.status_code == status
        assert "upstream says no" in exc.value.body

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("header", "expected"),
        [("7", 7.0), ("0.5", 0.5), ("Wed, 21 Oct 2026 07:28:00 GMT", None), (None, None)],
    )
    async def test_retry_after_header_is_carried(
        self, client: OpenAIClient, header: str | None, expected: float | None
    ) -> None:
        headers = {"retry-after": header} if header is not None else None
        error = _status_error(openai.RateLimitError, 429, "rate limit reached", headers)

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            with pytest.raises(UpstreamStatusError) as exc:
                await client.create_chat_completion(MESSAGES, max_tokens=10, temperature=0.0)

        assert exc.value.status_code == 429
        assert exc.value.retry_after == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error_cls", [openai.APIConnectionError, openai.APITimeoutError])
    async def test_io_errors_are_translated(self, client: OpenAIClient, error_cls: type) -> None:
        error = error_cls(request=httpx.Request("POST", CHAT_URL))

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            with pytest.raises(UpstreamConnectionError):
                await client.create_chat_completion(MESSAGES, max_tokens=10, temperature=0.0)

    @pytest.mark.asyncio
    async def test_list_models(self, client: OpenAIClient) -> None:
        page = MagicMock()
        page.data = [
            Model.model_validate(
                {"id": "llama-3.1-8b-instant", "object": "model", "created": 1, "owned_by": "Meta"}
            )
        ]

        with patch.object(
            client.client.models,
            "list",
            new_callable=AsyncMock,
            return_value=page,
        ):
            result = await client.list_models()

        assert result["object"] == "list"
        assert result["data"][0]["id"] == "llama-3.1-8b-instant"
        assert result["data"][0]["owned_by"] == "Meta"

    @pytest.mark.asyncio
    async def test_list_models_status_error(self, client: OpenAIClient) -> None:
        error = _status_error(openai.AuthenticationError, 401, "invalid api key")

        with patch.object(
            client.client.models,
            "list",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            with pytest.raises(UpstreamStatusError) as exc:
                await client.list_models()

        assert exc.value.status_code == 401


class TestLLMFactory:
    """Provider factory."""

    def test_groq_provider_uses_groq_base_url(self) -> None:
        cfg = LLMSettings().model_copy(
            update={"provider": "groq", "api_key": "gk", "base_url": None, "model": "m"}
        )

        client = create_llm_client(cfg)

        assert isinstance(client, OpenAIClient)
        assert client.model == "m"
        assert str(client.client.base_url).startswith(GROQ_BASE_URL)

    def test_openai_provider_uses_sdk_default(self) -> None:
        cfg = LLMSettings().model_copy(
            update={"provider": "openai", "api_key": "sk", "base_url": None}
        )

        client = create_llm_client(cfg)

        assert "api.openai.com" in str(client.client.base_url)

    def test_explicit_base_url_wins(self) -> None:
        cfg = LLMSettings().model_copy(
            update={"provider": "groq", "api_key": "gk", "base_url": "http://localhost:9999/v1"}
        )

        client = create_llm_client(cfg)

        assert str(client.client.base_url).startswith("http://localhost:9999/v1")

    @pytest.mark.parametrize("api_key", [None, "", "   "])
    def test_missing_api_key_raises_configuration_error(self, api_key: str | None) -> None:
        cfg = LLMSettings().model_copy(update={"api_key": api_key})

        with pytest.raises(ConfigurationAppError) as exc:
            create_llm_client(cfg)

        assert exc.value.code == "llm_missing_api_key"
        assert exc.value.status_code == 401
