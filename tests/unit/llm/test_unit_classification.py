# tests/unit/llm/test_unit_classification.py — v1
"""Tests for llm/classification.py — status mapping and error classification."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from adpulse.llm.classification import (
    BackendAttempt,
    Outcome,
    classify_error,
    extract_status,
    outcome_for_status,
)
from tests.conftest import StatusError


class TestOutcomeForStatus:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable(self, status):
        assert outcome_for_status(status) is Outcome.RETRYABLE

    @pytest.mark.parametrize("status", [400, 401, 403])
    def test_fatal(self, status):
        assert outcome_for_status(status) is Outcome.FATAL

    def test_unknown_is_retryable(self):
        assert outcome_for_status(418) is Outcome.RETRYABLE
        assert outcome_for_status(None) is Outcome.RETRYABLE


class TestExtractStatus:
    def test_status_code_attribute(self):
        assert extract_status(StatusError(429)) == 429

    def test_code_attribute(self):
        err = Exception("quota")
        err.code = 503  # type: ignore[attr-defined]
        assert extract_status(err) == 503

    def test_non_int_code_ignored(self):
        err = Exception("x")
        err.code = "RESOURCE_EXHAUSTED"  # type: ignore[attr-defined]
        assert extract_status(err) is None

    def test_response_attribute(self):
        err = Exception("x")
        err.response = SimpleNamespace(status_code=401)  # type: ignore[attr-defined]
        assert extract_status(err) == 401

    def test_none(self):
        assert extract_status(RuntimeError("boom")) is None


class TestClassifyError:
    def test_timeout(self):
        attempt = classify_error("gemini-2.5-flash", asyncio.TimeoutError())
        assert attempt.outcome is Outcome.RETRYABLE
        assert attempt.reason == "timed out"

    def test_quota(self):
        attempt = classify_error("a", StatusError(429, "quota exceeded"))
        assert attempt.outcome is Outcome.RETRYABLE
        assert attempt.status_code == 429
        assert attempt.reason == "429 quota exceeded"

    def test_forbidden_is_fatal(self):
        attempt = classify_error("a", StatusError(403, "bad key"))
        assert attempt.outcome is Outcome.FATAL

    def test_unknown_error_is_retryable(self):
        attempt = classify_error("a", RuntimeError())
        assert attempt.outcome is Outcome.RETRYABLE
        assert attempt.reason == "RuntimeError"


class TestBackendAttempt:
    def test_success(self):
        attempt = BackendAttempt.success("a", "text", latency_ms=12)
        assert attempt.succeeded
        assert attempt.text == "text"

    def test_failures_not_succeeded(self):
        assert not BackendAttempt.retryable("a", "x").succeeded
        assert not BackendAttempt.fatal("a", "x", 400).succeeded
