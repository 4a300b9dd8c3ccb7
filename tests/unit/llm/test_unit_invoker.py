# tests/unit/llm/test_unit_invoker.py — v2
"""Tests for llm/invoker.py — bounded single-backend calls."""

from __future__ import annotations

import pytest

from adpulse.llm.classification import Outcome
from adpulse.llm.client_factory import BackendSetupError, UnsupportedProviderError
from adpulse.llm.invoker import BackendInvoker
from adpulse.logging.context import get_context
from tests.conftest import ScriptedClient, StatusError, scripted_factory


def _invoker(behaviours, calls, **kwargs) -> BackendInvoker:
    return BackendInvoker(scripted_factory(behaviours, calls), **kwargs)


class TestBackendInvoker:
    @pytest.mark.asyncio
    async def test_success_strips_text(self):
        calls: list[str] = []
        invoker = _invoker({"m": {"text": "  Narrative \n"}}, calls)
        attempt = await invoker.invoke("m", "prompt")
        assert attempt.outcome is Outcome.SUCCESS
        assert attempt.text == "Narrative"
        assert calls == ["m"]

    @pytest.mark.asyncio
    async def test_timeout_is_retryable(self):
        invoker = _invoker({"m": {"text": "late", "delay_s": 1.0}}, [], timeout_s=0.01)
        attempt = await invoker.invoke("m", "prompt")
        assert attempt.outcome is Outcome.RETRYABLE
        assert attempt.reason == "timed out"

    @pytest.mark.asyncio
    async def test_empty_response_is_retryable(self):
        invoker = _invoker({"m": {"text": "   "}}, [])
        attempt = await invoker.invoke("m", "prompt")
        assert attempt.outcome is Outcome.RETRYABLE
        assert attempt.reason == "empty response"

    @pytest.mark.asyncio
    async def test_quota_is_retryable(self):
        invoker = _invoker({"m": {"error": StatusError(429)}}, [])
        attempt = await invoker.invoke("m", "prompt")
        assert attempt.outcome is Outcome.RETRYABLE
        assert attempt.status_code == 429

    @pytest.mark.asyncio
    async def test_forbidden_is_fatal(self):
        invoker = _invoker({"m": {"error": StatusError(403, "invalid key")}}, [])
        attempt = await invoker.invoke("m", "prompt")
        assert attempt.outcome is Outcome.FATAL

    @pytest.mark.asyncio
    async def test_unknown_error_is_retryable(self):
        invoker = _invoker({"m": {"error": RuntimeError("socket closed")}}, [])
        attempt = await invoker.invoke("m", "prompt")
        assert attempt.outcome is Outcome.RETRYABLE
        assert "socket closed" in attempt.reason

    @pytest.mark.asyncio
    async def test_client_reused(self):
        built = []

        def factory(spec):
            built.append(spec)
            return ScriptedClient(spec.model, text="ok")

        invoker = BackendInvoker(factory)
        await invoker.invoke("openai:gpt-4o", "p")
        await invoker.invoke("openai:gpt-4o", "p")
        assert len(built) == 1
        assert built[0].provider == "openai"

    @pytest.mark.asyncio
    async def test_setup_error_is_retryable(self):
        def factory(spec):
            raise UnsupportedProviderError(spec.backend_id, "unsupported provider 'x'")

        attempt = await BackendInvoker(factory).invoke("x:y", "p")
        assert attempt.outcome is Outcome.RETRYABLE
        assert "backend setup failed" in attempt.reason
        assert "'x:y'" in attempt.reason

    @pytest.mark.asyncio
    async def test_malformed_backend_id_is_retryable(self):
        attempt = await _invoker({}, []).invoke("openai:", "p")
        assert attempt.outcome is Outcome.RETRYABLE
        assert "Malformed backend id" in attempt.reason

    @pytest.mark.asyncio
    async def test_failed_setup_is_retried_next_time(self):
        built = []

        def factory(spec):
            built.append(spec)
            if len(built) == 1:
                raise BackendSetupError(spec.backend_id, "the 'openai' package is not installed")
            return ScriptedClient(spec.model, text="ok")

        invoker = BackendInvoker(factory)
        first = await invoker.invoke("openai:gpt-4o", "p")
        second = await invoker.invoke("openai:gpt-4o", "p")
        assert first.outcome is Outcome.RETRYABLE
        assert second.outcome is Outcome.SUCCESS
        assert len(built) == 2

    @pytest.mark.asyncio
    async def test_backend_context_reset(self):
        invoker = _invoker({"m": {"text": "ok"}}, [])
        await invoker.invoke("m", "prompt")
        assert get_context().backend is None
