"""Application-level exception types.

Each relay outcome other than success has its own error class. The class
fixes the HTTP status; the message is the exact text returned to callers in
the ``reply`` field. Handlers in ``exception_handlers`` turn them into
responses at a single boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are logged server-side only; callers receive the message.
    """

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: float
    model: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message (returned to the caller).
        details: Optional structured details for debugging/observability.
        headers: Optional extra response headers (e.g. Retry-After).
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    status_code: ClassVar[int] = 500

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when the relay request body is missing a required field."""

    status_code = 400


class UnauthorizedAppError(AppError):
    """Raised when the shared secret header is missing or wrong."""

    status_code = 401


class RateLimitedAppError(AppError):
    """Raised when a caller exceeds its request budget."""

    status_code = 429


class UpstreamAppError(AppError):
    """Raised when the upstream API answers with a non-success status."""

    status_code = 500


class EmptyReplyAppError(AppError):
    """Raised when the upstream payload carries no reply text."""

    status_code = 500


class ConfigurationError(AppError):
    """Raised at startup when required configuration is missing."""


class InternalAppError(AppError):
    """Raised for any other failure while handling a relay request."""

    status_code = 500
