# tests/unit/logging/test_logger.py — v2
"""Tests for logging/logger.py — logger factory and formatters."""

from __future__ import annotations

import json
import logging

from adpulse.logging.context import clear_context, set_backend_context, set_request_context
from adpulse.logging.logger import JsonFormatter, TextFormatter, get_logger, setup_logging


def _record(msg: str = "Hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("overview", "all-245-1582340")
        set_backend_context("gemini-2.5-flash")
        parsed = json.loads(JsonFormatter().format(_record("test msg")))
        assert parsed["context"] == {
            "context": "overview",
            "fingerprint": "all-245-1582340",
            "backend": "gemini-2.5-flash",
        }

    def test_format_with_data(self):
        record = _record()
        record.data = {"attempts": 2}
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["data"] == {"attempts": 2}


class TestTextFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record())
        assert "[INFO    ]" in output
        assert output.endswith("- Hello")

    def test_format_with_context(self):
        set_request_context("overview", "fp-1")
        set_backend_context("openai:gpt-4o")
        output = TextFormatter().format(_record())
        assert "[overview]" in output
        assert "<fp-1>" in output
        assert "(openai:gpt-4o)" in output


class TestGetLogger:
    def test_namespaced(self):
        assert get_logger("cache").name == "adpulse.cache"


class TestSetupLogging:
    def test_json_handler(self):
        setup_logging("DEBUG", "json")
        root = logging.getLogger("adpulse")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_no_handler_stacking(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("adpulse").handlers) == 1

    def test_quiets_httpx(self):
        setup_logging()
        assert logging.getLogger("httpx").level == logging.WARNING
