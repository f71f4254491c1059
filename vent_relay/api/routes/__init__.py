from __future__ import annotations

from vent_relay.api.routes.health import router as health_router
from vent_relay.api.routes.relay import router as relay_router

__all__ = ["health_router", "relay_router"]
