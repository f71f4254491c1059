"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Rolling window per caller network address (30 requests / 60 s by default).
- The limiter instance is owned by the application (``app.state``) and lives
  for the process lifetime; nothing is persisted.
- Runs after the shared-secret check, so rejected callers consume no budget.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from vent_relay.adapters.rate_limit.base import AbstractRateLimiter
from vent_relay.adapters.rate_limit.in_memory import SlidingWindowRateLimiter
from vent_relay.core.config import AppSettings
from vent_relay.core.errors import RateLimitedAppError

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests. Please slow down."


def build_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter:
    """Create the limiter for one application instance."""
    return SlidingWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


def get_client_address(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Resolve the caller identifier used as the rate-limit key.

    Args:
        request: FastAPI request.
        trust_forwarded_for: Use the first X-Forwarded-For hop when present.

    Returns:
        str: Client address, or "unknown" when the transport does not expose one.
    """

    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    return request.client.host if request.client else "unknown"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing client addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing per-caller rate limits.

    When enabled, records the request against the caller's window. If the
    caller already used its budget, raises RateLimitedAppError (HTTP 429)
    without recording the attempt.

    Args:
        request: FastAPI request.

    Raises:
        RateLimitedAppError: When the rate limit is exceeded.
    """

    app_settings: AppSettings = request.app.state.settings.app
    if not app_settings.rate_limit_enabled:
        return

    limiter: AbstractRateLimiter = request.app.state.rate_limiter
    key = get_client_address(request, trust_forwarded_for=app_settings.trust_forwarded_for)
    key_hash = _hash_limiter_key(key)

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": app_settings.rate_limit_window_seconds,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": app_settings.rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if app_settings.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    raise RateLimitedAppError(
        code="rate_limited",
        message=RATE_LIMITED_MESSAGE,
        details={"retry_after": retry_after},
        headers=headers or None,
    )
