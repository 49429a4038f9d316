from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from chat_relay.core.rate_limit import enforce_rate_limit
from chat_relay.schemas.chat import ChatRequest, ChatResponse
from chat_relay.services.relay_service import RelayService

router = APIRouter(tags=["Chat"])


def get_relay_service(request: Request) -> RelayService:
    """Return the relay service owned by the running application."""
    return request.app.state.relay_service


@router.post(
    "/chat",
    dependencies=[Depends(enforce_rate_limit)],
    response_model=None,
    responses={
        200: {
            "model": ChatResponse,
            "description": "Simplified reply (extracted mode). Raw mode relays the upstream payload.",
        },
    },
)
async def chat(
    body: ChatRequest,
    relay: Annotated[RelayService, Depends(get_relay_service)],
) -> dict[str, Any]:
    """Relay a conversation to the upstream model.

    Returns the upstream chat-completion payload, or ``{"response": text}``
    when the relay runs in extracted mode.

    Raises:
        HTTPException: 429 when the process-wide quota is exhausted.
        ConfigurationAppError: 401 when no upstream credential is configured.
        ValidationAppError: 400 when ``messages`` is missing or empty.
        LLMAppError: mapped upstream failures (401, 429, 400, 502, 500).
    """
    messages = [message.model_dump() for message in body.messages] if body.messages else None
    return await relay.chat(messages)


@router.get("/models")
async def list_models(
    relay: Annotated[RelayService, Depends(get_relay_service)],
) -> dict[str, Any]:
    """Relay the upstream "list available models" query."""
    return await relay.list_models()
