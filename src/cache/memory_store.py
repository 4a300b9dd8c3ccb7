# src/cache/memory_store.py — v1
"""In-process analysis store (CACHE_BACKEND=memory).

Keeps the same key scheme and expiry semantics as the shared backends. Used
for local development and tests; nothing survives a restart.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from adpulse.cache.base_cache_store import BaseAnalysisStore
from adpulse.cache.keys import analysis_key, timestamp_key
from adpulse.cache.models import CacheEntry
from adpulse.core.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class MemoryAnalysisStore(BaseAnalysisStore):
    """Dict-backed store with per-key expiry."""

    def __init__(
        self,
        default_ttl_s: int,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(default_ttl_s)
        self._clock = clock
        # key -> (value, expires_at)
        self._data: dict[str, tuple[str, datetime]] = {}

    async def get(self, day: date, fingerprint: str) -> CacheEntry | None:
        text = self._read(analysis_key(day, fingerprint))
        if text is None:
            return None
        stamp = self._read(timestamp_key(day, fingerprint))
        generated_at = datetime.fromisoformat(stamp) if stamp else self._clock()
        return CacheEntry(
            day=day, fingerprint=fingerprint, text=text, generated_at=generated_at
        )

    async def put(
        self,
        day: date,
        fingerprint: str,
        text: str,
        ttl_s: int | None = None,
    ) -> CacheEntry:
        now = self._clock()
        expires_at = now + timedelta(seconds=ttl_s or self._default_ttl_s)
        self._data[analysis_key(day, fingerprint)] = (text, expires_at)
        self._data[timestamp_key(day, fingerprint)] = (now.isoformat(), expires_at)
        logger.debug("Stored %s (expires %s)", analysis_key(day, fingerprint), expires_at)
        return CacheEntry(day=day, fingerprint=fingerprint, text=text, generated_at=now)

    def purge_expired(self) -> int:
        """Drop expired keys eagerly. Returns the number removed."""
        now = self._clock()
        expired = [k for k, (_, exp) in self._data.items() if exp <= now]
        for key in expired:
            del self._data[key]
        return len(expired)

    def _read(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value
