"""LLM adapter layer - OpenAI-compatible upstream providers."""

from chat_relay.adapters.llm.base import AbstractLLMClient
from chat_relay.adapters.llm.factory import create_llm_client
from chat_relay.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "OpenAIClient",
    "create_llm_client",
]
