import json
import logging

from fastapi import APIRouter, Depends, Request

from vent_relay.core.auth import verify_app_secret
from vent_relay.core.errors import AppError, InternalAppError
from vent_relay.core.rate_limit import enforce_rate_limit
from vent_relay.schemas.relay import RelayResponse
from vent_relay.services.relay_service import RelayService, parse_relay_request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay"])


def _is_json_media_type(content_type: str | None) -> bool:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def _read_json_body(request: Request) -> object:
    """Decode a JSON request body; anything else counts as no body."""
    if not _is_json_media_type(request.headers.get("content-type")):
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        logger.warning("relay.invalid_json", extra={"body_bytes": len(raw)})
        return None


@router.post(
    "/vent",
    response_model=RelayResponse,
    dependencies=[Depends(verify_app_secret), Depends(enforce_rate_limit)],
    responses={
        400: {"model": RelayResponse, "description": "Missing systemPrompt or userText."},
        401: {"model": RelayResponse, "description": "Shared secret mismatch."},
        429: {"model": RelayResponse, "description": "Rate limit exceeded."},
        500: {"model": RelayResponse, "description": "Upstream or server error."},
    },
)
async def vent(request: Request) -> RelayResponse:
    """Relay a system prompt and user text to the chat model.

    The body is JSON ``{"systemPrompt": str, "userText": str}``. The secret
    and rate-limit checks run first (as dependencies), so a request with a
    bad secret is rejected even if its fields are missing.

    Returns:
        RelayResponse: ``{"reply": "<trimmed model text>"}``.

    Raises:
        AppError: Mapped to the fixed status/reply table by the handlers.
    """
    service: RelayService = request.app.state.relay_service

    try:
        payload = await _read_json_body(request)
        relay_request = parse_relay_request(payload)
        reply = await service.relay(relay_request)
    except AppError:
        raise
    except Exception as exc:
        logger.exception(
            "relay.unexpected_error",
            extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
        )
        raise InternalAppError(
            code="internal_error",
            message=f"Server error: {exc}",
        ) from exc

    return RelayResponse(reply=reply)
