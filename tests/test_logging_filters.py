"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from vent_relay.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    reset_request_id,
    set_request_id,
)


@pytest.fixture
def log_stream() -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_credentials(log_stream):
    logger, stream = log_stream

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "x-app-secret": "shared-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "sk-secret-123" not in output
    assert "shared-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_conversation_text(log_stream):
    logger, stream = log_stream

    logger.info(
        "relay_event",
        extra={
            "system_prompt": "You are a therapist",
            "user_text": "I had an awful day at work",
            "reply": "That sounds hard",
            "user_text_chars": 26,
        },
    )

    output = stream.getvalue()
    assert "therapist" not in output
    assert "awful day" not in output
    assert "sounds hard" not in output
    assert "user_text_chars" in output


def test_sensitive_filter_redacts_nested_dicts(log_stream):
    logger, stream = log_stream

    logger.info(
        "nested_event",
        extra={
            "headers": {"authorization": "Bearer sk-abc", "user-agent": "pytest"},
            "payload": {"messages": [{"role": "user", "content": "private"}], "model": "gpt"},
        },
    )

    output = stream.getvalue()
    assert "sk-abc" not in output
    assert "private" not in output
    assert "pytest" in output
    assert "gpt" in output


def test_json_formatter_includes_request_id_from_context(log_stream):
    logger, stream = log_stream

    token = set_request_id("req-123")
    try:
        logger.info("with_request_id", extra={"status": 200})
    finally:
        reset_request_id(token)

    record = json.loads(stream.getvalue())
    assert record["request_id"] == "req-123"
    assert record["message"] == "with_request_id"
    assert record["level"] == "info"
    assert record["status"] == 200


def test_record_without_request_context_has_no_request_id(log_stream):
    logger, stream = log_stream

    logger.info("outside_request")

    record = json.loads(stream.getvalue())
    assert "request_id" not in record


def test_exception_is_serialized(log_stream):
    logger, stream = log_stream

    try:
        raise RuntimeError("upstream exploded")
    except RuntimeError:
        logger.exception("relay.unexpected_error", extra={"error_type": "RuntimeError"})

    record = json.loads(stream.getvalue())
    assert record["level"] == "error"
    assert "upstream exploded" in record["exc_info"]
