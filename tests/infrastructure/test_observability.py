"""Structured Logging — JSON formatter fields and setup_logging wiring."""

import json
import logging
import sys

import pytest

from handshake_tokens.infrastructure.observability import (
    JSONFormatter, setup_logging,
)


def _record(msg="hello", exc_info=None, **extra):
    record = logging.LogRecord(
        name="handshake_tokens.test", level=logging.WARNING, pathname=__file__,
        lineno=1, msg=msg, args=(), exc_info=exc_info,
    )
    for key, val in extra.items():
        setattr(record, key, val)
    return record


def test_json_formatter_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "handshake_tokens.test"
    assert log["message"] == "hello"
    assert "timestamp" in log


def test_json_formatter_surfaces_known_extras_only():
    record = _record(
        error_code="ENGINE_ERROR", operation="save", namespace="AUTH",
        foreign_id=42, unrelated="ignored",
    )
    log = json.loads(JSONFormatter().format(record))
    assert log["error_code"] == "ENGINE_ERROR"
    assert log["operation"] == "save"
    assert log["namespace"] == "AUTH"
    assert log["foreign_id"] == 42
    assert "unrelated" not in log


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())
    log = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in log["exception"]


def test_json_formatter_custom_fields_and_record_time():
    record = _record(request_id="r-1", error_code="ENGINE_ERROR")
    record.created = 0.0
    log = json.loads(JSONFormatter(fields=("request_id",)).format(record))
    assert log["request_id"] == "r-1"
    assert "error_code" not in log
    assert log["timestamp"] == "1970-01-01T00:00:00+00:00"


@pytest.mark.parametrize("fmt, formatter_type", [
    ("json", JSONFormatter),
    ("text", logging.Formatter),
])
def test_setup_logging_installs_handler(fmt, formatter_type):
    previous_level = logging.root.level
    handler = setup_logging("debug", fmt)
    try:
        assert handler in logging.root.handlers
        assert isinstance(handler.formatter, formatter_type)
        assert logging.root.level == logging.DEBUG
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(previous_level)


def test_setup_logging_unknown_level_falls_back_to_info():
    previous_level = logging.root.level
    handler = setup_logging("chatty")
    try:
        assert logging.root.level == logging.INFO
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(previous_level)
