"""Shared-secret authentication.

Callers present a static secret in the ``X-App-Secret`` header. When a
secret is configured (APP_SECRET), anything but an exact match is rejected
with 401 before any other processing, including rate limiting. When no
secret is configured, every request is admitted.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from typing import Annotated

from fastapi import Header, Request

from vent_relay.core.errors import UnauthorizedAppError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized."


def _fingerprint(value: str) -> str:
    """Short hash for logging a credential without exposing it."""
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def validate_app_secret(provided: str | None, configured: str | None) -> None:
    """Check a provided secret against the configured one.

    Pure validation logic without FastAPI dependencies for easy testing.

    Args:
        provided: Header value sent by the caller, or None when absent.
        configured: Secret from configuration; None or empty disables the check.

    Raises:
        UnauthorizedAppError: If a secret is configured and ``provided`` does
            not match it exactly.
    """
    if not configured:
        return

    if provided is None:
        logger.warning(
            "auth.missing_secret",
            extra={"auth_required": True, "secret_present": False},
        )
        raise UnauthorizedAppError(code="missing_app_secret", message=UNAUTHORIZED_MESSAGE)

    if not secrets.compare_digest(provided.encode(), configured.encode()):
        logger.warning(
            "auth.invalid_secret",
            extra={
                "auth_required": True,
                "secret_present": True,
                "secret_hash": _fingerprint(provided),
            },
        )
        raise UnauthorizedAppError(code="invalid_app_secret", message=UNAUTHORIZED_MESSAGE)


async def verify_app_secret(
    request: Request,
    x_app_secret: Annotated[str | None, Header(alias="X-App-Secret")] = None,
) -> None:
    """FastAPI dependency enforcing the shared secret.

    Usage:
        @router.post("/vent", dependencies=[Depends(verify_app_secret)])

    Args:
        request: FastAPI request (settings are read from ``app.state``).
        x_app_secret: Value of the X-App-Secret header (injected by FastAPI).

    Raises:
        UnauthorizedAppError: 401 when the secret does not match.
    """
    configured = request.app.state.settings.app.secret
    if not configured:
        logger.debug("auth.skipped", extra={"reason": "no_secret_configured"})
        return

    validate_app_secret(x_app_secret, configured)
