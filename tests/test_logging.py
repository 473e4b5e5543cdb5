from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest

from becs_portal.core.config import Settings
from becs_portal.core.context import enter_request, leave_request, set_actor
from becs_portal.core.logging import configure_logging


@pytest.fixture()
def log_buffer() -> Iterator[io.StringIO]:
    configure_logging(Settings(environment="test", log_level="INFO"))
    handler = next(h for h in logging.getLogger().handlers if isinstance(h, logging.StreamHandler))
    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)
    try:
        yield buffer
    finally:
        handler.flush()
        handler.setStream(previous_stream)


def _last_line(buffer: io.StringIO) -> dict:
    lines = buffer.getvalue().strip().splitlines()
    assert lines, "Expected a structured log line"
    return json.loads(lines[-1])


def test_log_lines_carry_request_actor_and_extras(log_buffer: io.StringIO) -> None:
    token = enter_request("req-json-1")
    try:
        set_actor(42)
        logging.getLogger("becs_portal.tests").info("Task submitted", extra={"task_id": 7})
    finally:
        leave_request(token)

    payload = _last_line(log_buffer)
    assert payload["message"] == "Task submitted"
    assert payload["level"] == "INFO"
    assert payload["service"] == "BECS Portal"
    assert payload["environment"] == "test"
    assert payload["request_id"] == "req-json-1"
    assert payload["actor_id"] == 42
    assert payload["task_id"] == 7


def test_explicit_actor_wins_and_context_is_dropped_after_request(log_buffer: io.StringIO) -> None:
    token = enter_request("req-json-2")
    set_actor(42)
    leave_request(token)

    logging.getLogger("becs_portal.tests").warning("Outside a request", extra={"actor_id": 5})

    payload = _last_line(log_buffer)
    assert payload["request_id"] == "-"
    assert payload["actor_id"] == 5


def test_exceptions_are_rendered_as_an_error_object(log_buffer: io.StringIO) -> None:
    try:
        raise RuntimeError("disk full")
    except RuntimeError:
        logging.getLogger("becs_portal.tests").exception("Upload failed")

    payload = _last_line(log_buffer)
    assert "actor_id" not in payload
    assert payload["error"]["type"] == "RuntimeError"
    assert payload["error"]["detail"] == "disk full"
    assert "Traceback" in payload["error"]["traceback"]
