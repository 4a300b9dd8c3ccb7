# src/llm/fallback.py — v1
"""Ordered multi-backend fallback.

Backends are tried in preference order:
  - SUCCESS returns at once, later backends are never called;
  - RETRYABLE waits a fixed backoff (skipped after the last backend) and moves on;
  - FATAL aborts the whole run, remaining backends are never called;
  - exhausting the list raises AllBackendsExhaustedError.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

from adpulse.core.errors import AnalysisPipelineError
from adpulse.llm.classification import BackendAttempt, Outcome
from adpulse.llm.invoker import BackendInvoker

logger = logging.getLogger(__name__)


class BackendFatalError(AnalysisPipelineError):
    """A backend rejected the request in a way no other backend would accept."""

    def __init__(self, attempt: BackendAttempt):
        self.attempt = attempt
        self.status_code = attempt.status_code
        super().__init__(
            f"Fatal error from backend '{attempt.backend_id}': {attempt.reason}"
        )


class AllBackendsExhaustedError(AnalysisPipelineError):
    """Every configured backend failed with a retryable error."""

    def __init__(self, attempts: list[BackendAttempt]):
        self.attempts = attempts
        self.tried = len(attempts)
        self.last_reason = attempts[-1].reason if attempts else None
        super().__init__(
            f"All {self.tried} backends failed or hit their limits. "
            f"Last error: {self.last_reason or 'unknown'}. Try again in a few minutes."
        )


@dataclass
class FallbackResult:
    """Text from the first backend that succeeded, plus the attempts made."""

    text: str
    backend_id: str
    attempts: list[BackendAttempt] = field(default_factory=list)


class FallbackOrchestrator:
    """Drives a BackendInvoker across an ordered list of backend ids."""

    def __init__(
        self,
        invoker: BackendInvoker,
        backend_ids: Sequence[str],
        backoff_s: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if backoff_s <= 0:
            raise ValueError("backoff_s must be > 0")
        self._invoker = invoker
        self._backend_ids = list(backend_ids)
        self._backoff_s = backoff_s
        self._sleep = sleep

    @property
    def backend_ids(self) -> list[str]:
        return list(self._backend_ids)

    async def generate(
        self, prompt: str, backend_ids: Sequence[str] | None = None
    ) -> FallbackResult:
        """Return the first successful generation.

        Raises:
            BackendFatalError: On a validation/authorization failure.
            AllBackendsExhaustedError: When every backend failed retryably.
            ValueError: If no backend is configured.
        """
        candidates = list(backend_ids) if backend_ids is not None else self._backend_ids
        if not candidates:
            raise ValueError("at least one backend id is required")

        attempts: list[BackendAttempt] = []
        total = len(candidates)
        for i, backend_id in enumerate(candidates):
            logger.info("[%d/%d] Trying analysis with %s", i + 1, total, backend_id)
            attempt = await self._invoker.invoke(backend_id, prompt)
            attempts.append(attempt)

            if attempt.outcome is Outcome.SUCCESS:
                logger.info(
                    "Analysis generated by %s (backend %d of %d)", backend_id, i + 1, total
                )
                return FallbackResult(
                    text=attempt.text or "", backend_id=backend_id, attempts=attempts
                )

            if attempt.outcome is Outcome.FATAL:
                logger.error("Aborting fallback on fatal error from %s", backend_id)
                raise BackendFatalError(attempt)

            if i < total - 1:
                logger.info(
                    "Escalating to next backend in %.1fs (%s)", self._backoff_s, attempt.reason
                )
                await self._sleep(self._backoff_s)

        raise AllBackendsExhaustedError(attempts)
