# tests/unit/llm/test_unit_config.py — v3
"""Tests for llm/config.py — backend id parsing and resolution."""

from __future__ import annotations

import pytest

from adpulse.config.settings import ConfigurationError, Settings
from adpulse.llm.config import BackendSpec, parse_backend_id, resolve_backends


class TestParseBackendId:
    def test_bare_model_uses_default_provider(self):
        spec = parse_backend_id("gemini-2.5-flash")
        assert spec == BackendSpec("gemini-2.5-flash", "google", "gemini-2.5-flash")

    def test_provider_prefix(self):
        spec = parse_backend_id("openai:gpt-4o-mini")
        assert spec.provider == "openai"
        assert spec.model == "gpt-4o-mini"
        assert spec.key == "openai:gpt-4o-mini"

    def test_custom_default_provider(self):
        assert parse_backend_id("claude-x", "anthropic").provider == "anthropic"

    def test_strips_whitespace(self):
        assert parse_backend_id("  anthropic : claude-x ").model == "claude-x"

    @pytest.mark.parametrize("value", ["", "   ", ":model", "openai:"])
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            parse_backend_id(value)


class TestResolveBackends:
    def test_default_order(self):
        specs = resolve_backends(Settings(_env_file=None))
        assert [s.model for s in specs] == [
            "gemini-2.5-flash",
            "gemini-2.5-flash-lite",
            "gemini-robotics-er-1.5-preview",
        ]
        assert {s.provider for s in specs} == {"google"}

    def test_mixed_providers(self):
        s = Settings(_env_file=None, analysis_backends="gemini-2.5-flash,openai:gpt-4o")
        assert [spec.key for spec in resolve_backends(s)] == [
            "google:gemini-2.5-flash",
            "openai:gpt-4o",
        ]

    def test_malformed_entry_is_configuration_error(self):
        s = Settings(_env_file=None, analysis_backends="gemini-2.5-flash,openai:")
        with pytest.raises(ConfigurationError, match="ANALYSIS_BACKENDS"):
            resolve_backends(s)
