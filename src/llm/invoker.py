# src/llm/invoker.py — v2
"""Backend invoker: one bounded call to one text-generation backend.

invoke() never raises for backend or setup failures; it returns a classified
BackendAttempt. Clients are created lazily per backend id and reused.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from adpulse.core.errors import AnalysisPipelineError
from adpulse.llm.base_client import BaseLLMClient
from adpulse.llm.classification import BackendAttempt, classify_error
from adpulse.llm.config import BackendSpec, parse_backend_id
from adpulse.llm.models import Message
from adpulse.logging.context import set_backend_context

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BackendSpec], BaseLLMClient]


class BackendInvoker:
    """Calls a backend with a single prompt and classifies the outcome."""

    def __init__(
        self,
        client_factory: ClientFactory,
        timeout_s: float = 30.0,
        default_provider: str = "google",
        max_tokens: int = 2048,
        temperature: float = 0.4,
    ) -> None:
        self._client_factory = client_factory
        self._timeout_s = timeout_s
        self._default_provider = default_provider
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._clients: dict[str, BaseLLMClient] = {}

    async def invoke(self, backend_id: str, prompt: str) -> BackendAttempt:
        set_backend_context(backend_id)
        try:
            return await self._invoke(backend_id, prompt)
        finally:
            set_backend_context(None)

    async def _invoke(self, backend_id: str, prompt: str) -> BackendAttempt:
        try:
            client = self._client_for(backend_id)
        except (AnalysisPipelineError, ValueError) as e:
            # Not cached: a fixed deployment is picked up on the next render.
            logger.warning("Backend %s could not be set up: %s", backend_id, e)
            return BackendAttempt.retryable(backend_id, f"backend setup failed: {e}")

        t0 = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.complete(
                    [Message(role="user", content=prompt)],
                    max_tokens=self._max_tokens,
                    temperature=self._temperature,
                ),
                timeout=self._timeout_s,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001 - every SDK error is classified
            attempt = classify_error(backend_id, e)
            logger.warning(
                "Backend %s failed (%s): %s", backend_id, attempt.outcome.value, attempt.reason
            )
            return attempt

        latency = int((time.monotonic() - t0) * 1000)
        text = (response.content or "").strip()
        if not text:
            logger.warning("Backend %s returned no usable content", backend_id)
            return BackendAttempt.retryable(backend_id, "empty response")

        logger.debug("Backend %s answered in %dms", backend_id, latency)
        return BackendAttempt.success(backend_id, text, latency_ms=latency)

    def _client_for(self, backend_id: str) -> BaseLLMClient:
        client = self._clients.get(backend_id)
        if client is None:
            spec = parse_backend_id(backend_id, self._default_provider)
            client = self._client_factory(spec)
            self._clients[backend_id] = client
        return client
