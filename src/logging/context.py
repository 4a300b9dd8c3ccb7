# src/logging/context.py — v2
"""Contextual logging support: attach UI context, fingerprint and backend to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per generation request; asyncio tasks inherit a copy.
_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "context", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_backend: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "backend", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    context: str | None = None
    fingerprint: str | None = None
    backend: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        context=_context.get(),
        fingerprint=_fingerprint.get(),
        backend=_backend.get(),
    )


def set_request_context(context: str, fingerprint: str) -> None:
    """Set request-level context (called once per generation request)."""
    _context.set(context)
    _fingerprint.set(fingerprint)


def set_backend_context(backend: str | None) -> None:
    """Set backend-level context (called per backend attempt)."""
    _backend.set(backend)


def clear_context() -> None:
    _context.set(None)
    _fingerprint.set(None)
    _backend.set(None)
