"""Request correlation middleware.

Registered with ``app.middleware("http")(request_id_middleware)``.
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from vent_relay.core.logging import reset_request_id, set_request_id

DEFAULT_REQUEST_ID_HEADER = "X-Request-ID"


def _request_id_header(request: Request) -> str:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return DEFAULT_REQUEST_ID_HEADER
    return settings.log.request_id_header


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request with an id and report it back with the elapsed time.

    The caller's id (``LOG_REQUEST_ID_HEADER``) is reused when present,
    otherwise a UUID4 is generated. Log records emitted while the request is
    served pick the id up from context.
    """
    header_name = _request_id_header(request)
    request_id = request.headers.get(header_name) or str(uuid.uuid4())

    token = set_request_id(request_id)
    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        reset_request_id(token)

    response.headers[header_name] = request_id
    response.headers["X-Request-Duration-ms"] = f"{(time.perf_counter() - started) * 1000:.2f}"
    return response
