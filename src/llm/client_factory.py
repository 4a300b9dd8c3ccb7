# src/llm/client_factory.py — v4
"""Factory: build the LLM client behind one resolved backend.

Called by the invoker the first time a backend id is used. Adapters import
their SDK lazily, so the SDK is checked here; a deployment without it fails
with a BackendSetupError naming the backend instead of an ImportError from
inside the first request.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from dataclasses import dataclass

from adpulse.config.settings import ConfigurationError, Settings
from adpulse.llm.base_client import BaseLLMClient
from adpulse.llm.config import BackendSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Provider:
    adapter: str  # class path, imported on first use
    sdk_module: str
    api_key_setting: str


_PROVIDERS: dict[str, _Provider] = {
    "google": _Provider(
        "adpulse.llm.adapters.google_adapter.GoogleAdapter",
        "google.generativeai",
        "google_api_key",
    ),
    "openai": _Provider(
        "adpulse.llm.adapters.openai_adapter.OpenAIAdapter", "openai", "openai_api_key"
    ),
    "anthropic": _Provider(
        "adpulse.llm.adapters.anthropic_adapter.AnthropicAdapter",
        "anthropic",
        "anthropic_api_key",
    ),
}


class BackendSetupError(ConfigurationError):
    """A backend id cannot be turned into a working client."""

    def __init__(self, backend_id: str, reason: str) -> None:
        self.backend_id = backend_id
        super().__init__(f"Backend {backend_id!r}: {reason}")


class UnsupportedProviderError(BackendSetupError, ValueError):
    """The backend names a provider with no adapter."""


def supported_providers() -> list[str]:
    return sorted(_PROVIDERS)


def create_llm_client(
    spec: BackendSpec,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the adapter for ``spec``.

    Args:
        spec: Resolved backend (provider and model).
        settings: Application settings; supplies the provider API key.
        **kwargs: Extra adapter arguments; an explicit ``api_key`` wins.

    Raises:
        UnsupportedProviderError: The provider has no adapter.
        BackendSetupError: The provider SDK is not installed.
    """
    provider = _PROVIDERS.get(spec.provider)
    if provider is None:
        raise UnsupportedProviderError(
            spec.backend_id,
            f"unsupported provider {spec.provider!r} "
            f"(available: {', '.join(supported_providers())})",
        )
    if not _sdk_installed(provider.sdk_module):
        raise BackendSetupError(
            spec.backend_id,
            f"the {provider.sdk_module!r} package is not installed",
        )

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = spec.model
    if settings is not None:
        init_kwargs.setdefault("api_key", getattr(settings, provider.api_key_setting))

    logger.debug("Creating LLM client for %s", spec.key)
    return _import_class(provider.adapter)(**init_kwargs)


def _sdk_installed(module: str) -> bool:
    try:
        return importlib.util.find_spec(module) is not None
    except (ModuleNotFoundError, ValueError):
        # parent package missing, or a module masked with None in sys.modules
        return False


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
