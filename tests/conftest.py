# tests/conftest.py — v2
"""Shared test fixtures for unit tests.

Provides campaign records, a pinned clock, an in-memory store and scripted
LLM clients. No external dependencies; all I/O is in memory.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Callable

import pytest

from adpulse.analysis.models import CampaignRecord
from adpulse.cache.memory_store import MemoryAnalysisStore
from adpulse.llm.base_client import BaseLLMClient
from adpulse.llm.config import BackendSpec
from adpulse.llm.models import LLMResponse, Message

TODAY = date(2025, 12, 8)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class StatusError(Exception):
    """Stand-in for an SDK HTTP error carrying ``status_code``."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"HTTP {status_code}")


class ScriptedClient(BaseLLMClient):
    """LLM client replaying a fixed behaviour: a text, an exception, or a delay."""

    def __init__(
        self,
        model: str,
        text: str = "",
        error: BaseException | None = None,
        delay_s: float = 0.0,
        calls: list[str] | None = None,
    ) -> None:
        self._model = model
        self._text = text
        self._error = error
        self._delay_s = delay_s
        self.calls = calls if calls is not None else []

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.4,
    ) -> LLMResponse:
        self.calls.append(self._model)
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        if self._error is not None:
            raise self._error
        return LLMResponse(
            content=self._text, model=self._model, provider="fake", latency_ms=1
        )

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return self._model


def scripted_factory(
    behaviours: dict[str, dict], calls: list[str]
) -> Callable[[BackendSpec], BaseLLMClient]:
    """Client factory building ScriptedClients from ``{model: kwargs}``."""

    def factory(spec: BackendSpec) -> BaseLLMClient:
        return ScriptedClient(spec.model, calls=calls, **behaviours[spec.model])

    return factory


def make_record(day: date, impressions: float = 1000, **overrides) -> CampaignRecord:
    defaults = dict(
        date=day,
        campaign_name="Summer - Video",
        impressions=impressions,
        clicks=impressions * 0.01,
        video_views=impressions * 0.5,
        video_completions=impressions * 0.3,
        total_engagements=impressions * 0.02,
        vehicle="Facebook",
        purchase_type="Reserva",
        campaign="Summer",
    )
    defaults.update(overrides)
    return CampaignRecord(**defaults)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 12, 8, 15, 30, tzinfo=timezone.utc))


@pytest.fixture
def memory_store(clock: FrozenClock) -> MemoryAnalysisStore:
    return MemoryAnalysisStore(default_ttl_s=86_400, clock=clock)


@pytest.fixture
def current_week() -> list[CampaignRecord]:
    """Seven days ending on 2025-12-07, two vehicles."""
    start = date(2025, 12, 1)
    rows = []
    for i in range(7):
        day = start + timedelta(days=i)
        rows.append(make_record(day, impressions=2000))
        rows.append(make_record(day, impressions=500, vehicle="TikTok", purchase_type="Programática"))
    return rows


@pytest.fixture
def all_rows(current_week: list[CampaignRecord]) -> list[CampaignRecord]:
    """Current week plus the week before it."""
    previous = [
        make_record(r.date - timedelta(days=7), impressions=r.impressions / 2,
                    vehicle=r.vehicle, purchase_type=r.purchase_type)
        for r in current_week
    ]
    return previous + current_week
