"""Pydantic schemas for the chat relay endpoints."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One chat turn in OpenAI-compatible form."""

    role: str = Field(
        ..., description="Author of the message, e.g. 'system', 'user' or 'assistant'."
    )
    content: str = Field(..., description="Message text.")


class ChatRequest(BaseModel):
    """Inbound chat request from the frontend.

    ``messages`` is optional at the schema level so an empty or missing list
    reaches the relay and is rejected there with a 400.
    """

    messages: List[ChatMessage] | None = Field(
        default=None,
        description="Ordered conversation to forward to the model (must be non-empty).",
    )


class ChatResponse(BaseModel):
    """Simplified reply returned when the relay runs in extracted mode."""

    response: str = Field(..., description="Text generated by the model.")


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Static liveness indicator.")
