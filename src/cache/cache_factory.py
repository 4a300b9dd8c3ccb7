# src/cache/cache_factory.py — v3
"""Factory for analysis store instantiation."""

from __future__ import annotations

from adpulse.cache.base_cache_store import BaseAnalysisStore
from adpulse.config.settings import ONE_DAY_S, Settings


def create_analysis_store(settings: Settings | None = None) -> BaseAnalysisStore:
    """Instantiate the configured store backend.

    Args:
        settings: Application settings. Defaults to an in-memory store with a 24h TTL.

    Returns:
        Configured BaseAnalysisStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend
    ttl = ONE_DAY_S if settings is None else settings.analysis_ttl_s

    if backend == "memory":
        from adpulse.cache.memory_store import MemoryAnalysisStore
        return MemoryAnalysisStore(default_ttl_s=ttl)

    if backend == "json":
        from adpulse.cache.json_store import JsonAnalysisStore
        return JsonAnalysisStore(cache_root=settings.cache_root, default_ttl_s=ttl)

    if backend == "redis":
        from adpulse.cache.redis_store import RedisAnalysisStore
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisAnalysisStore(redis_url=settings.cache_redis_url, default_ttl_s=ttl)

    if backend == "http":
        from adpulse.cache.http_store import HttpAnalysisStore
        if not settings.cache_api_url:
            raise ValueError("CACHE_API_URL must be set when CACHE_BACKEND=http")
        return HttpAnalysisStore(
            api_url=settings.cache_api_url,
            default_ttl_s=ttl,
            timeout_s=settings.cache_api_timeout_s,
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
