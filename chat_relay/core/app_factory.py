from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (collaborators, middleware, handlers, routers)
so tests can build isolated apps with their own limiter and upstream client.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay.adapters.llm.base import AbstractLLMClient
from chat_relay.adapters.llm.factory import create_llm_client
from chat_relay.adapters.rate_limit.base import AbstractRateLimiter
from chat_relay.api.routes import chat_router, health_router
from chat_relay.core.config import Settings, settings as default_settings
from chat_relay.core.errors import ConfigurationAppError
from chat_relay.core.exception_handlers import setup_exception_handlers
from chat_relay.core.logging import configure_logging
from chat_relay.core.middleware import request_id_middleware
from chat_relay.core.rate_limit import build_rate_limiter
from chat_relay.services.relay_service import RelayService

logger = logging.getLogger(__name__)


def _build_llm_client(app_settings: Settings) -> AbstractLLMClient | None:
    """Build the upstream client, or None when the credential is missing.

    A missing credential must not stop the service from starting: the health
    endpoint stays up and chat requests fail with 401 until it is configured.
    """
    try:
        return create_llm_client(app_settings.llm)
    except ConfigurationAppError as exc:
        logger.warning(
            "llm.not_configured",
            extra={"error_code": exc.code, "provider": app_settings.llm.provider},
        )
        return None


def create_app(
    app_settings: Settings | None = None,
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    llm_client: AbstractLLMClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to use; defaults to the global settings.
        rate_limiter: Limiter to share across requests; built from settings if omitted.
        llm_client: Upstream client; built from settings if omitted.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Chat Relay API",
        description=(
            "Relays chat conversations from a frontend to an OpenAI-compatible "
            "LLM provider (Groq or OpenAI) behind a process-wide request quota."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
    )

    app.state.settings = cfg
    app.state.rate_limiter = rate_limiter or build_rate_limiter(cfg.app)
    app.state.relay_service = RelayService(
        llm_client if llm_client is not None else _build_llm_client(cfg),
        cfg.llm,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.app.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[
            cfg.log.request_id_header,
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
        ],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(chat_router, prefix="/api")
    app.include_router(health_router, prefix="/api")

    logger.info(
        "app.created",
        extra={
            "provider": cfg.llm.provider,
            "model": cfg.llm.model,
            "response_mode": cfg.llm.response_mode,
            "rate_limit_enabled": cfg.app.rate_limit_enabled,
            "rate_limit_capacity": cfg.app.rate_limit_capacity,
            "rate_limit_refill_interval_s": cfg.app.rate_limit_refill_interval_seconds,
        },
    )

    return app
