# src/llm/base_client.py — v2
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from adpulse.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all text-generation providers.

    Adapters let SDK exceptions propagate unchanged; classification into
    retryable or fatal outcomes happens in the invoker.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.4,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, openai, anthropic)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model the adapter was created for."""
