"""
CORS Configuration
Cross-Origin Resource Sharing settings for browser clients.

- Default: any origin may call the relay (the shared secret is the gate).
- APP_RESTRICT_ORIGIN=true with ALLOWED_ORIGIN set: only that origin.
"""
from __future__ import annotations

from fastapi.middleware.cors import CORSMiddleware

from vent_relay.core.config import Settings


def get_cors_middleware(settings: Settings):
    """Return the CORS middleware class and its keyword options."""
    allowed_origin = settings.server.allowed_origin
    if settings.app.restrict_origin and allowed_origin:
        allowed_origins = [allowed_origin]
    else:
        allowed_origins = ["*"]

    return CORSMiddleware, {
        "allow_origins": allowed_origins,
        "allow_credentials": False,
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": [
            "Content-Type",
            "X-App-Secret",
            settings.log.request_id_header,
        ],
        "expose_headers": [settings.log.request_id_header, "Retry-After"],
        "max_age": 600,
    }
