# src/analysis/coordinator.py — v2
"""Generation coordinator: the entry point the dashboard calls on every render.

Flow for one ensure_analysis() call:
  1. Empty current period -> fixed "no data" text, no I/O at all.
  2. Same fingerprint as the last successful run for this context -> the
     previous text as a cached result, no I/O (re-renders do not refire).
  3. At most one generation per context: a caller for the fingerprint being
     generated joins that run; a caller for another fingerprint gets
     GenerationInProgressError instead of a second backend sequence.
  4. Store lookup for (today, fingerprint) unless forced; hit -> was_cached.
  5. Miss -> prompt from current vs benchmark vs previous period, fallback
     across backends, persist under the configured TTL.

Store read failures degrade to a miss. A failed write is logged and the
generated text is still returned (persisted=False).
"""

from __future__ import annotations

import logging
from datetime import date, timezone, tzinfo
from typing import Sequence

from adpulse.analysis.aggregation import previous_period
from adpulse.analysis.benchmarks import BenchmarkTable
from adpulse.analysis.models import AnalysisResult, CampaignRecord
from adpulse.analysis.prompt import build_analysis_prompt
from adpulse.analysis.single_flight import SingleFlight
from adpulse.cache.base_cache_store import BaseAnalysisStore, StoreIOError
from adpulse.cache.keys import analysis_key, check_fingerprint
from adpulse.cache.models import CacheEntry
from adpulse.core.clock import Clock, today_in, utc_now
from adpulse.core.errors import AnalysisPipelineError
from adpulse.llm.fallback import FallbackOrchestrator
from adpulse.logging.context import set_request_context

logger = logging.getLogger(__name__)

NO_DATA_TEXT = "No data available to analyze for this week."
DEFAULT_CONTEXT = "default"


class GenerationInProgressError(AnalysisPipelineError):
    """Another fingerprint is already being generated for the same context."""

    def __init__(self, context: str, fingerprint: str) -> None:
        self.context = context
        self.fingerprint = fingerprint
        super().__init__(f"Analysis for {fingerprint} is still generating in {context}")


class GenerationCoordinator:
    """Checks the store, generates on miss and writes the result back."""

    def __init__(
        self,
        store: BaseAnalysisStore,
        orchestrator: FallbackOrchestrator,
        benchmarks: BenchmarkTable | None = None,
        *,
        ttl_s: int | None = None,
        comparison_days: int = 7,
        language: str = "Brazilian Portuguese",
        tz: tzinfo = timezone.utc,
        clock: Clock = utc_now,
        single_flight: SingleFlight[AnalysisResult] | None = None,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._benchmarks = benchmarks or BenchmarkTable()
        self._ttl_s = ttl_s
        self._comparison_days = comparison_days
        self._language = language
        self._tz = tz
        self._clock = clock
        # keyed by context; at most one generation per context
        self._flights = single_flight or SingleFlight()
        # context -> fingerprint being generated
        self._generating: dict[str, str] = {}
        # context -> (fingerprint, result) of the last successful run
        self._last: dict[str, tuple[str, AnalysisResult]] = {}

    def today(self) -> date:
        return today_in(self._tz, self._clock)

    def is_generating(
        self, fingerprint: str | None = None, context: str = DEFAULT_CONTEXT
    ) -> bool:
        """True while ``context`` has a run in flight (for ``fingerprint`` if given)."""
        running = self._generating.get(context)
        if running is None:
            return False
        return fingerprint is None or running == fingerprint

    def last_fingerprint(self, context: str = DEFAULT_CONTEXT) -> str | None:
        last = self._last.get(context)
        return last[0] if last else None

    def forget(self, context: str = DEFAULT_CONTEXT) -> None:
        """Drop the remembered fingerprint, e.g. when the period filter is left."""
        self._last.pop(context, None)

    async def ensure_analysis(
        self,
        current: Sequence[CampaignRecord],
        historical: Sequence[CampaignRecord],
        fingerprint: str,
        force_refresh: bool = False,
        context: str = DEFAULT_CONTEXT,
    ) -> AnalysisResult:
        """Return the analysis for ``fingerprint``, generating it if needed.

        Args:
            current: Records of the period being analyzed.
            historical: All loaded records; the comparison period is taken from here.
            fingerprint: Cache key of the filtered dataset.
            force_refresh: Skip the store and the unchanged-fingerprint check.
            context: UI context owning the request (one per dashboard panel/session).

        Raises:
            GenerationInProgressError: Another fingerprint is being generated
                for this context.
            BackendFatalError: A backend rejected the request (bad key, bad request).
            AllBackendsExhaustedError: Every backend failed retryably.
        """
        if not current:
            return AnalysisResult(
                text=NO_DATA_TEXT,
                was_cached=False,
                generated_at=self._clock(),
                persisted=False,
            )

        check_fingerprint(fingerprint)

        if not force_refresh:
            last = self._last.get(context)
            if last is not None and last[0] == fingerprint:
                logger.debug("Analysis already produced for %s, skipping", fingerprint)
                return _as_cached(last[1])

        running = self._generating.get(context)
        if running is not None and running != fingerprint:
            logger.info(
                "Generation for %s in progress in %s, ignoring %s",
                running, context, fingerprint,
            )
            raise GenerationInProgressError(context, running)

        self._generating[context] = fingerprint
        return await self._flights.run(
            context,
            lambda: self._run(current, historical, fingerprint, force_refresh, context),
        )

    async def _run(
        self,
        current: Sequence[CampaignRecord],
        historical: Sequence[CampaignRecord],
        fingerprint: str,
        force_refresh: bool,
        context: str,
    ) -> AnalysisResult:
        try:
            result = await self._produce(
                current, historical, fingerprint, force_refresh, context
            )
        finally:
            self._generating.pop(context, None)
        self._last[context] = (fingerprint, result)
        return result

    async def _produce(
        self,
        current: Sequence[CampaignRecord],
        historical: Sequence[CampaignRecord],
        fingerprint: str,
        force_refresh: bool,
        context: str,
    ) -> AnalysisResult:
        set_request_context(context, fingerprint)
        today = self.today()

        if not force_refresh:
            cached = await self._read_cached(today, fingerprint)
            if cached is not None:
                logger.info("Analysis loaded from cache (generated at %s)", cached.generated_at)
                return AnalysisResult(
                    text=cached.text, was_cached=True, generated_at=cached.generated_at
                )
            logger.info("No cached analysis, generating a new one")
        else:
            logger.info("Refresh forced, generating a new analysis")

        previous = previous_period(current, historical, self._comparison_days)
        prompt = build_analysis_prompt(
            current, previous or None, self._benchmarks, self._language
        )
        generated = await self._orchestrator.generate(prompt)

        generated_at = self._clock()
        persisted = True
        try:
            entry = await self._store.put(today, fingerprint, generated.text, self._ttl_s)
            generated_at = entry.generated_at
        except StoreIOError as e:
            persisted = False
            logger.warning(
                "Could not persist %s, keeping in-memory result: %s",
                analysis_key(today, fingerprint), e,
            )

        return AnalysisResult(
            text=generated.text,
            was_cached=False,
            generated_at=generated_at,
            backend_id=generated.backend_id,
            persisted=persisted,
        )

    async def _read_cached(self, today: date, fingerprint: str) -> CacheEntry | None:
        try:
            return await self._store.get(today, fingerprint)
        except StoreIOError as e:
            logger.warning("Cache read failed, treating as miss: %s", e)
            return None


def _as_cached(result: AnalysisResult) -> AnalysisResult:
    """A remembered result served again; only persisted text counts as cached."""
    if not result.persisted:
        return result
    return result.model_copy(update={"was_cached": True, "backend_id": None})
