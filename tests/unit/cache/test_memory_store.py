# tests/unit/cache/test_memory_store.py — v1
"""Tests for cache/memory_store.py — expiry and key pairing."""

from __future__ import annotations

from datetime import date

import pytest

from adpulse.cache.memory_store import MemoryAnalysisStore

TODAY = date(2025, 12, 8)


class TestMemoryAnalysisStore:
    @pytest.mark.asyncio
    async def test_put_then_get(self, memory_store, clock):
        before = clock()
        await memory_store.put(TODAY, "all-245-1582340", "Narrative")
        entry = await memory_store.get(TODAY, "all-245-1582340")
        assert entry is not None
        assert entry.text == "Narrative"
        assert entry.generated_at >= before

    @pytest.mark.asyncio
    async def test_miss(self, memory_store):
        assert await memory_store.get(TODAY, "nothing") is None

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self, memory_store, clock):
        await memory_store.put(TODAY, "fp", "Narrative", ttl_s=60)
        clock.advance(seconds=59)
        assert await memory_store.get(TODAY, "fp") is not None
        clock.advance(seconds=1)
        assert await memory_store.get(TODAY, "fp") is None

    @pytest.mark.asyncio
    async def test_default_ttl(self, memory_store, clock):
        await memory_store.put(TODAY, "fp", "Narrative")
        clock.advance(hours=24)
        assert await memory_store.get(TODAY, "fp") is None

    @pytest.mark.asyncio
    async def test_overwrite_replaces_text(self, memory_store):
        await memory_store.put(TODAY, "fp", "generated")
        await memory_store.overwrite(TODAY, "fp", "edited")
        entry = await memory_store.get(TODAY, "fp")
        assert entry.text == "edited"

    @pytest.mark.asyncio
    async def test_days_are_independent(self, memory_store):
        await memory_store.put(TODAY, "fp", "today")
        assert await memory_store.get(date(2025, 12, 7), "fp") is None

    @pytest.mark.asyncio
    async def test_purge_expired(self, memory_store, clock):
        await memory_store.put(TODAY, "fp", "Narrative", ttl_s=10)
        clock.advance(seconds=11)
        assert memory_store.purge_expired() == 2

    def test_rejects_zero_ttl(self, clock):
        with pytest.raises(ValueError):
            MemoryAnalysisStore(default_ttl_s=0, clock=clock)
