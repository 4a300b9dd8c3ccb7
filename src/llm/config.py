# src/llm/config.py — v3
"""Backend identifiers and their resolution to provider + model.

A backend id is either ``provider:model`` (``openai:gpt-4o-mini``) or a bare
model name, which resolves to the default provider (``gemini-2.5-flash`` ->
``google:gemini-2.5-flash``). Order in ANALYSIS_BACKENDS is preference order.
"""

from __future__ import annotations

from dataclasses import dataclass

from adpulse.config.settings import ConfigurationError, Settings

_FALLBACK_PROVIDER = "google"


@dataclass(frozen=True)
class BackendSpec:
    """Resolved provider:model for one backend id."""

    backend_id: str
    provider: str
    model: str

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def parse_backend_id(backend_id: str, default_provider: str = _FALLBACK_PROVIDER) -> BackendSpec:
    """Parse a backend id into a BackendSpec.

    Raises:
        ValueError: If the id is blank or names an empty provider/model.
    """
    value = backend_id.strip()
    if not value:
        raise ValueError("backend id must not be empty")
    if ":" not in value:
        return BackendSpec(backend_id=value, provider=default_provider, model=value)
    provider, model = (part.strip() for part in value.split(":", 1))
    if not provider or not model:
        raise ValueError(f"Malformed backend id: {backend_id!r}")
    return BackendSpec(backend_id=value, provider=provider, model=model)


def resolve_backends(settings: Settings) -> list[BackendSpec]:
    """Resolve ANALYSIS_BACKENDS in preference order.

    Raises:
        ConfigurationError: An entry is not a valid backend id.
    """
    specs = []
    for backend_id in settings.backend_list:
        try:
            specs.append(parse_backend_id(backend_id, settings.default_provider))
        except ValueError as e:
            raise ConfigurationError(f"ANALYSIS_BACKENDS: {e}") from e
    return specs
