# src/api/facade.py — v3
"""Public API facade: wires store, backends, coordinator and history from settings.

Usage:
    from adpulse.api.facade import create_analysis_service
    service = create_analysis_service()
    result = await service.ensure_analysis(current, all_rows, fingerprint)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from adpulse.analysis.benchmarks import BenchmarkTable
from adpulse.analysis.coordinator import DEFAULT_CONTEXT, GenerationCoordinator
from adpulse.analysis.history import AnalysisHistory
from adpulse.analysis.models import AnalysisResult, CampaignRecord
from adpulse.cache.cache_factory import create_analysis_store
from adpulse.cache.models import CacheEntry, HistoryItem
from adpulse.config.settings import Settings
from adpulse.core.clock import Clock, utc_now
from adpulse.llm.client_factory import create_llm_client
from adpulse.llm.config import BackendSpec, resolve_backends
from adpulse.llm.fallback import FallbackOrchestrator
from adpulse.llm.invoker import BackendInvoker, ClientFactory

if TYPE_CHECKING:
    from datetime import date

    from adpulse.cache.base_cache_store import BaseAnalysisStore

logger = logging.getLogger(__name__)


@dataclass
class AnalysisService:
    """Everything the dashboard needs, owned by the hosting application."""

    settings: Settings
    store: BaseAnalysisStore
    coordinator: GenerationCoordinator
    history: AnalysisHistory

    async def ensure_analysis(
        self,
        current: Sequence[CampaignRecord],
        historical: Sequence[CampaignRecord],
        fingerprint: str,
        force_refresh: bool = False,
        context: str = DEFAULT_CONTEXT,
    ) -> AnalysisResult:
        return await self.coordinator.ensure_analysis(
            current, historical, fingerprint, force_refresh=force_refresh, context=context
        )

    async def list_history(self, fingerprint: str) -> list[HistoryItem]:
        return await self.history.list_history(fingerprint)

    async def read_by_day(self, fingerprint: str, day: date | None = None) -> str | None:
        return await self.history.read_by_day(fingerprint, day)

    async def save_edit(
        self,
        fingerprint: str,
        text: str,
        token: str | None = None,
        context: str = DEFAULT_CONTEXT,
    ) -> CacheEntry:
        """Save an edited analysis; the next render re-reads it from the store."""
        entry = await self.history.save(fingerprint, text, token=token)
        self.coordinator.forget(context)
        return entry

    async def aclose(self) -> None:
        await self.store.close()


def create_analysis_service(
    settings: Settings | None = None,
    *,
    store: BaseAnalysisStore | None = None,
    client_factory: ClientFactory | None = None,
    benchmarks: BenchmarkTable | None = None,
    clock: Clock = utc_now,
) -> AnalysisService:
    """Build an AnalysisService.

    Args:
        settings: Global settings. Loaded from .env if None.
        store: Pre-built store; created from settings if None.
        client_factory: Maps a BackendSpec to an LLM client; SDK adapters if None.
        benchmarks: Benchmark table; BENCHMARKS_FILE or built-in defaults if None.
        clock: Time source for day partitions and timestamps.

    Raises:
        ConfigurationError: ANALYSIS_BACKENDS holds a malformed backend id.
    """
    settings = settings or Settings()
    # Malformed ANALYSIS_BACKENDS entries fail here, not on the first render.
    backends = resolve_backends(settings)
    store = store or create_analysis_store(settings)

    if client_factory is None:
        def client_factory(spec: BackendSpec):
            return create_llm_client(spec, settings)

    if benchmarks is None:
        if settings.benchmarks_file is not None:
            benchmarks = BenchmarkTable.from_file(settings.benchmarks_file)
        else:
            benchmarks = BenchmarkTable()

    invoker = BackendInvoker(
        client_factory,
        timeout_s=settings.backend_timeout_s,
        default_provider=settings.default_provider,
        max_tokens=settings.backend_max_tokens,
        temperature=settings.backend_temperature,
    )
    orchestrator = FallbackOrchestrator(
        invoker,
        [spec.backend_id for spec in backends],
        backoff_s=settings.fallback_backoff_s,
    )
    coordinator = GenerationCoordinator(
        store,
        orchestrator,
        benchmarks,
        ttl_s=settings.analysis_ttl_s,
        comparison_days=settings.comparison_window_days,
        language=settings.analysis_language,
        tz=settings.tz,
        clock=clock,
    )
    history = AnalysisHistory(
        store,
        settings.history_window_days,
        editor_token=settings.editor_token,
        tz=settings.tz,
        clock=clock,
    )
    logger.debug(
        "Analysis service ready: cache=%s, backends=%s",
        settings.cache_backend, ", ".join(spec.key for spec in backends),
    )
    return AnalysisService(
        settings=settings, store=store, coordinator=coordinator, history=history
    )
