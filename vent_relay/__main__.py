"""Command-line entry point: ``python -m vent_relay`` or ``vent-relay``.

Configuration is validated before the server starts; without an upstream
credential the process exits with status 1 and never binds the port.
"""

from __future__ import annotations

import logging

import uvicorn

from vent_relay.core.app_factory import create_app
from vent_relay.core.config import LogSettings, load_settings
from vent_relay.core.errors import ConfigurationError
from vent_relay.core.logging import configure_logging

logger = logging.getLogger("vent_relay")


def main() -> None:
    configure_logging(LogSettings())

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.critical(
            "startup.invalid_configuration",
            extra={"error_code": exc.code, "error_message": exc.message},
        )
        raise SystemExit(1) from exc

    app = create_app(settings)
    logger.info(
        "startup.listening",
        extra={"host": settings.server.host, "port": settings.server.port},
    )
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
