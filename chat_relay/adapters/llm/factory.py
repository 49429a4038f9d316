"""Factory pattern for creating LLM client instances."""

from chat_relay.adapters.llm.base import AbstractLLMClient
from chat_relay.adapters.llm.openai_client import OpenAIClient
from chat_relay.core.config import LLMSettings, settings
from chat_relay.core.errors import ConfigurationAppError


def create_llm_client(llm_settings: LLMSettings | None = None) -> AbstractLLMClient:
    """Instantiate the upstream client for the configured provider.

    Both providers speak the OpenAI chat-completions schema, so they share
    one client class and differ only in base URL. The provider name itself
    is constrained by ``LLMSettings``.

    Args:
        llm_settings: Settings to use; defaults to the global settings.

    Returns:
        AbstractLLMClient: Configured LLM client instance.

    Raises:
        ConfigurationAppError: If the API key is missing.
    """
    cfg = llm_settings or settings.llm

    if not cfg.api_key or not cfg.api_key.strip():
        raise ConfigurationAppError(
            code="llm_missing_api_key",
            message=f"Missing API key for provider '{cfg.provider}'. Set LLM_API_KEY.",
            details={"provider": cfg.provider},
        )

    return OpenAIClient(
        api_key=cfg.api_key,
        model=cfg.model,
        base_url=cfg.resolved_base_url,
        timeout_seconds=cfg.timeout_seconds,
        connect_timeout_seconds=cfg.connect_timeout_seconds,
    )
