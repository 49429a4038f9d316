from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Interface for clients of an OpenAI-compatible chat-completions API."""

	@abstractmethod
	async def create_chat_completion(
		self,
		messages: list[dict[str, str]],
		*,
		max_tokens: int,
		temperature: float,
	) -> dict[str, Any]:
		"""Send one chat completion request and return the upstream JSON payload.

		Args:
			messages: Ordered chat messages, each with "role" and "content".
			max_tokens: Maximum output length requested from the model.
			temperature: Sampling temperature.

		Returns:
			dict[str, Any]: The upstream response body.

		Raises:
			UpstreamStatusError: If the upstream answered with an HTTP error status.
			UpstreamConnectionError: If the upstream could not be reached.
		"""
		...

	@abstractmethod
	async def list_models(self) -> dict[str, Any]:
		"""Return the upstream "list models" payload.

		Raises:
			UpstreamStatusError: If the upstream answered with an HTTP error status.
			UpstreamConnectionError: If the upstream could not be reached.
		"""
		...
