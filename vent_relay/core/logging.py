"""Structured logging for the relay.

Records leave the process as one JSON object per line. Conversation text and
credentials never do: ``SensitiveDataFilter`` masks them on the record before
any formatter sees it, and ``RequestIdFilter`` stamps the id of the request
being served.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from vent_relay.core.config import LogSettings

REDACTED = "[REDACTED]"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Matched case-insensitively against extra field names at any nesting depth
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "api_key",
        "openai_api_key",
        "authorization",
        "secret",
        "app_secret",
        "x-app-secret",
        "system_prompt",
        "systemprompt",
        "user_text",
        "usertext",
        "reply",
        "content",
        "messages",
    }
)

# Every attribute a bare LogRecord carries; anything else came in via ``extra``
_RECORD_ATTRS = frozenset(vars(LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def set_request_id(request_id: str | None) -> Token[str | None]:
    return _request_id_var.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id_var.reset(token)


def get_request_id() -> str | None:
    return _request_id_var.get()


def _extra_fields(record: LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


def _mask(value: Any, sensitive_keys: frozenset[str]) -> Any:
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in sensitive_keys else _mask(v, sensitive_keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_mask(v, sensitive_keys) for v in value]
    return value


class RequestIdFilter(logging.Filter):
    """Attach the current request id unless the record already has one."""

    def filter(self, record: LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask credentials and conversation text carried in ``extra`` fields."""

    def __init__(self, sensitive_keys: Iterable[str] = SENSITIVE_KEYS_DEFAULT) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(key.lower() for key in sensitive_keys)

    def filter(self, record: LogRecord) -> bool:
        masked = _mask(_extra_fields(record), self.sensitive_keys)
        record.__dict__.update(masked)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; pair it with ``SensitiveDataFilter``."""

    def format(self, record: LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in _extra_fields(record).items() if value is not None
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/vent_relay.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    # maxBytes=0 never rolls over
    return RotatingFileHandler(
        file_path,
        maxBytes=log_settings.max_bytes,
        backupCount=log_settings.backup_count,
        encoding="utf-8",
    )


def configure_logging(log_settings: LogSettings) -> None:
    """Install a single redacting handler on the root logger.

    Args:
        log_settings: Level, format (``json`` or ``plain``) and destination.
    """
    handler = _build_handler(log_settings)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if log_settings.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_settings.level.upper(), logging.INFO))

    # uvicorn installs its own handlers; keep its records from printing twice
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).propagate = False
