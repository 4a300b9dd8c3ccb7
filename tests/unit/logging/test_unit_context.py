# tests/unit/logging/test_context.py — v2
"""Tests for logging/context.py — contextual logging variables."""

from __future__ import annotations

import asyncio

import pytest

from adpulse.logging.context import (
    LogContext,
    clear_context,
    get_context,
    set_backend_context,
    set_request_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.context is None
        assert ctx.fingerprint is None
        assert ctx.backend is None

    def test_set_request_context(self):
        set_request_context("overview", "all-1-1")
        ctx = get_context()
        assert ctx.context == "overview"
        assert ctx.fingerprint == "all-1-1"

    def test_set_and_reset_backend(self):
        set_backend_context("gemini-2.5-flash")
        assert get_context().backend == "gemini-2.5-flash"
        set_backend_context(None)
        assert get_context().backend is None

    def test_as_dict_skips_none(self):
        assert LogContext(context="c").as_dict() == {"context": "c"}

    @pytest.mark.asyncio
    async def test_tasks_do_not_leak_context(self):
        async def worker():
            set_request_context("panel", "fp")

        await asyncio.create_task(worker())
        assert get_context().context is None
