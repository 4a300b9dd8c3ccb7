# src/cache/redis_store.py — v2
"""Redis-based analysis store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Text and timestamp keys are written with the same EX so they expire together.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from adpulse.cache.base_cache_store import BaseAnalysisStore, StoreIOError
from adpulse.cache.keys import analysis_key, timestamp_key
from adpulse.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class RedisAnalysisStore(BaseAnalysisStore):
    """Redis-backed store shared by every dashboard instance."""

    def __init__(self, redis_url: str, default_ttl_s: int) -> None:
        super().__init__(default_ttl_s)
        try:
            import redis.asyncio as aioredis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client: Any = aioredis.Redis.from_url(redis_url, decode_responses=True)

    async def get(self, day: date, fingerprint: str) -> CacheEntry | None:
        from redis.exceptions import RedisError

        key = analysis_key(day, fingerprint)
        try:
            text, stamp = await self._client.mget(key, timestamp_key(day, fingerprint))
        except RedisError as e:
            raise StoreIOError(f"Redis read failed for {key}: {e}") from e

        if text is None:
            logger.debug("Cache MISS: %s", key)
            return None

        logger.debug("Cache HIT: %s", key)
        generated_at = _parse_stamp(stamp) if stamp else datetime.now(timezone.utc)
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
        from redis.exceptions import RedisError

        key = analysis_key(day, fingerprint)
        ttl = ttl_s or self._default_ttl_s
        now = datetime.now(timezone.utc)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(key, text, ex=ttl)
                pipe.set(timestamp_key(day, fingerprint), now.isoformat(), ex=ttl)
                await pipe.execute()
        except RedisError as e:
            raise StoreIOError(f"Redis write failed for {key}: {e}") from e

        logger.info("Cache SAVED: %s (ttl=%ds)", key, ttl)
        return CacheEntry(day=day, fingerprint=fingerprint, text=text, generated_at=now)

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()


def _parse_stamp(stamp: str) -> datetime:
    # JavaScript writers emit a trailing "Z"
    return datetime.fromisoformat(stamp.replace("Z", "+00:00"))
