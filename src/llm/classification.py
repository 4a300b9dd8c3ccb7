# src/llm/classification.py — v1
"""Classification of backend call outcomes.

Every attempt ends as exactly one of SUCCESS, RETRYABLE or FATAL. Status codes
are mapped through STATUS_OUTCOMES; anything unmapped or without a status is
RETRYABLE so the fallback chain keeps going.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


# Throughput/availability -> try the next backend.
# Validation/authorization -> caller-side defect, would repeat on every backend.
STATUS_OUTCOMES: dict[int, Outcome] = {
    429: Outcome.RETRYABLE,
    500: Outcome.RETRYABLE,
    502: Outcome.RETRYABLE,
    503: Outcome.RETRYABLE,
    504: Outcome.RETRYABLE,
    400: Outcome.FATAL,
    401: Outcome.FATAL,
    403: Outcome.FATAL,
}


@dataclass(frozen=True)
class BackendAttempt:
    """Result of one call to one backend."""

    backend_id: str
    outcome: Outcome
    text: str | None = None
    reason: str | None = None
    status_code: int | None = None
    latency_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def success(cls, backend_id: str, text: str, latency_ms: int = 0) -> BackendAttempt:
        return cls(backend_id, Outcome.SUCCESS, text=text, latency_ms=latency_ms)

    @classmethod
    def retryable(
        cls, backend_id: str, reason: str, status_code: int | None = None
    ) -> BackendAttempt:
        return cls(backend_id, Outcome.RETRYABLE, reason=reason, status_code=status_code)

    @classmethod
    def fatal(
        cls, backend_id: str, reason: str, status_code: int | None = None
    ) -> BackendAttempt:
        return cls(backend_id, Outcome.FATAL, reason=reason, status_code=status_code)


def outcome_for_status(status_code: int | None) -> Outcome:
    """Map an HTTP-style status to an outcome. Unknown statuses are retryable."""
    if status_code is None:
        return Outcome.RETRYABLE
    return STATUS_OUTCOMES.get(status_code, Outcome.RETRYABLE)


def extract_status(error: BaseException) -> int | None:
    """Pull the HTTP status out of an SDK exception.

    openai/anthropic expose ``status_code``; google.api_core exposes ``code``;
    raw httpx errors carry it on ``response``.
    """
    for attr in ("status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def classify_error(backend_id: str, error: BaseException) -> BackendAttempt:
    """Turn an exception raised by a backend call into a BackendAttempt."""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return BackendAttempt.retryable(backend_id, "timed out")

    status = extract_status(error)
    message = _error_message(error)
    reason = f"{status} {message}" if status is not None else message

    if outcome_for_status(status) is Outcome.FATAL:
        return BackendAttempt.fatal(backend_id, reason, status)
    return BackendAttempt.retryable(backend_id, reason, status)


def _error_message(error: BaseException) -> str:
    message = str(error).strip()
    return message or type(error).__name__
