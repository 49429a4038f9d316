from __future__ import annotations

from fastapi import APIRouter

from chat_relay.schemas.chat import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint.

    Returns a static status so load balancers can verify the API is up.
    """

    return HealthResponse(status="ok")
