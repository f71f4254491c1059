from __future__ import annotations

"""Application factory for the relay.

Centralizes app construction (settings, logging, middleware, handlers,
routers and the process-lifetime rate-limit table) so tests can build
isolated instances.
"""

import logging

import httpx
from fastapi import FastAPI

from vent_relay import __version__
from vent_relay.adapters.llm.base import AbstractChatClient
from vent_relay.adapters.llm.factory import create_llm_client
from vent_relay.api.routes import health_router, relay_router
from vent_relay.core.config import Settings, load_settings
from vent_relay.core.cors import get_cors_middleware
from vent_relay.core.exception_handlers import setup_exception_handlers
from vent_relay.core.logging import configure_logging
from vent_relay.core.middleware import request_id_middleware
from vent_relay.core.openapi import apply_openapi_customizations
from vent_relay.core.rate_limit import build_rate_limiter
from vent_relay.services.relay_service import RelayService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    llm_client: AbstractChatClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Pre-built settings; read from the environment when omitted.
        llm_client: Upstream client override (tests).
        http_client: httpx client handed to the OpenAI SDK (tests, proxies).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    settings = settings or load_settings()

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Vent Relay",
        description=(
            "Relays a system prompt and user text to the OpenAI chat-completion "
            "API and returns the reply. Guarded by an optional shared secret "
            "(X-App-Secret) and a per-client rate limit."
        ),
        version=__version__,
    )

    app.state.settings = settings
    app.state.rate_limiter = build_rate_limiter(settings.app)
    app.state.relay_service = RelayService(
        llm=llm_client or create_llm_client(settings, http_client=http_client)
    )

    # Middleware
    app.middleware("http")(request_id_middleware)
    cors_middleware, cors_options = get_cors_middleware(settings)
    app.add_middleware(cors_middleware, **cors_options)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(relay_router)
    app.include_router(health_router)

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app)

    logger.info(
        "app.configured",
        extra={
            "port": settings.server.port,
            "allowed_origin": settings.server.allowed_origin,
            "restrict_origin": settings.app.restrict_origin,
            "secret_required": bool(settings.app.secret),
            "rate_limit_requests": settings.app.rate_limit_requests,
            "rate_limit_window_s": settings.app.rate_limit_window_seconds,
            "model": settings.upstream.model,
        },
    )

    return app
