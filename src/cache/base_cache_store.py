# src/cache/base_cache_store.py — v2
"""Abstract analysis store interface.

Entries are addressed by (day, fingerprint) and expire after a TTL. An
expired entry is a plain miss. Backends only implement the point operations;
the trailing-window scan is shared.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, timedelta

from adpulse.cache.models import CacheEntry
from adpulse.core.errors import AnalysisPipelineError

logger = logging.getLogger(__name__)


class StoreIOError(AnalysisPipelineError):
    """Transport or server failure while talking to a store (not a miss)."""


class BaseAnalysisStore(ABC):
    """Unified interface for analysis storage backends."""

    def __init__(self, default_ttl_s: int) -> None:
        if default_ttl_s <= 0:
            raise ValueError("default_ttl_s must be > 0")
        self._default_ttl_s = default_ttl_s

    @property
    def default_ttl_s(self) -> int:
        return self._default_ttl_s

    @abstractmethod
    async def get(self, day: date, fingerprint: str) -> CacheEntry | None:
        """Retrieve the entry for (day, fingerprint); None on miss.

        Raises:
            StoreIOError: If the backend could not be read.
        """

    @abstractmethod
    async def put(
        self,
        day: date,
        fingerprint: str,
        text: str,
        ttl_s: int | None = None,
    ) -> CacheEntry:
        """Store text and its generation timestamp under one TTL.

        Raises:
            StoreIOError: If the backend could not be written.
        """

    async def overwrite(self, day: date, fingerprint: str, text: str) -> CacheEntry:
        """Replace an entry after a manual edit. Same TTL policy as put()."""
        return await self.put(day, fingerprint, text)

    async def list_window(
        self,
        fingerprint: str,
        window_days: int,
        today: date,
    ) -> list[CacheEntry]:
        """Scan the trailing window, most recent day first.

        Days without an entry are skipped. A day whose lookup fails is logged
        and skipped too, so one bad read does not blank out the others.
        """
        entries: list[CacheEntry] = []
        for offset in range(window_days):
            day = today - timedelta(days=offset)
            try:
                entry = await self.get(day, fingerprint)
            except StoreIOError as e:
                logger.warning("History lookup failed for %s/%s: %s", day, fingerprint, e)
                continue
            if entry is not None:
                entries.append(entry)
        return entries

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
