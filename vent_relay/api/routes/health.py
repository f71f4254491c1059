from __future__ import annotations

from fastapi import APIRouter

from vent_relay import __version__

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Liveness probe for the hosting platform.

    Not subject to the shared secret or the rate limit.
    """

    return {"status": "ok", "version": __version__}
