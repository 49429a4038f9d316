"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so local .env files are ignored, and seeds the environment
variables settings are read from.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("LLM_PROVIDER", "groq")
os.environ.setdefault("LLM_MODEL", "test-model")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("APP_CORS_ALLOWED_ORIGINS", "http://localhost:5173")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable  # noqa: E402
from unittest.mock import AsyncMock, Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from chat_relay.adapters.llm.base import AbstractLLMClient  # noqa: E402
from chat_relay.adapters.rate_limit.token_bucket import TokenBucketRateLimiter  # noqa: E402
from chat_relay.core.app_factory import create_app  # noqa: E402
from chat_relay.core.config import Settings  # noqa: E402


def build_settings(
    *,
    llm: dict[str, Any] | None = None,
    app: dict[str, Any] | None = None,
    log: dict[str, Any] | None = None,
) -> Settings:
    """Build a Settings instance from the environment with per-test overrides."""
    base = Settings()
    return base.model_copy(
        update={
            "llm": base.llm.model_copy(update=llm or {}),
            "app": base.app.model_copy(update=app or {}),
            "log": base.log.model_copy(update=log or {}),
        }
    )


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    return build_settings


@pytest.fixture
def sample_completion() -> dict[str, Any]:
    """Minimal OpenAI-compatible chat completion payload."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": "Hello from the model"},
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 4, "total_tokens": 9},
    }


@pytest.fixture
def fake_llm(sample_completion: dict[str, Any]) -> AsyncMock:
    """Upstream client double returning ``sample_completion`` by default."""
    llm = AsyncMock(spec=AbstractLLMClient)
    llm.create_chat_completion.return_value = sample_completion
    llm.list_models.return_value = {
        "object": "list",
        "data": [{"id": "test-model", "object": "model", "owned_by": "groq"}],
    }
    return llm


@pytest.fixture
def clock() -> Mock:
    """Controllable time source for limiters (seconds)."""
    return Mock(return_value=0.0)


@pytest.fixture
def make_client(fake_llm: AsyncMock, clock: Mock) -> Callable[..., TestClient]:
    """Build a TestClient around an isolated app.

    Keyword overrides:
        llm / app / log: settings overrides (see ``build_settings``).
        capacity / refill_interval_seconds: limiter shape.
        llm_client: upstream double; pass ``None`` explicitly to build from settings.
    """

    def _make(
        *,
        llm: dict[str, Any] | None = None,
        app: dict[str, Any] | None = None,
        log: dict[str, Any] | None = None,
        capacity: int = 10,
        refill_interval_seconds: int = 60,
        **kwargs: Any,
    ) -> TestClient:
        llm_overrides = {"retry_backoff_seconds": 0.0, **(llm or {})}
        cfg = build_settings(llm=llm_overrides, app=app, log=log)
        limiter = TokenBucketRateLimiter(
            capacity=capacity,
            refill_interval_seconds=refill_interval_seconds,
            clock=clock,
        )
        llm_client = kwargs["llm_client"] if "llm_client" in kwargs else fake_llm
        return TestClient(create_app(cfg, rate_limiter=limiter, llm_client=llm_client))

    return _make
