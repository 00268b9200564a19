from __future__ import annotations

import io
import json
import logging

from tollgate.core.context.tenant import tenant_context
from tollgate.core.context.user import AutoUserContext
from tollgate.core.logging.context import log_context
from tollgate.core.logging.json_formatter import JSONFormatter


def _logger(stream: io.StringIO) -> logging.Logger:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger = logging.getLogger("tollgate.test.json")
    logger.handlers = []
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)
    return logger


def test_logging_json_line_with_call_context() -> None:
    stream = io.StringIO()
    logger = _logger(stream)

    with tenant_context("acme"), AutoUserContext("operator", "secret"), log_context(correlation_id="c1"):
        logger.info("hello", extra={"extra_fields": {"status": 409}})

    payload = json.loads(stream.getvalue().strip())
    assert payload["msg"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "tollgate.test.json"
    assert payload["correlation_id"] == "c1"
    assert payload["tenant"] == "acme"
    assert payload["user"] == "operator"
    assert payload["status"] == 409
    assert "secret" not in stream.getvalue()
    assert "ts_iso_utc" in payload


def test_tokens_are_redacted_from_messages() -> None:
    stream = io.StringIO()
    logger = _logger(stream)

    logger.info("sending Authorization: Bearer abc.def token=xyz")

    payload = json.loads(stream.getvalue().strip())
    assert "abc.def" not in payload["msg"]
    assert "xyz" not in payload["msg"]
