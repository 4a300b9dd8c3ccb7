# src/analysis/history.py — v1
"""History listing and manual override of persisted analyses.

Past days are read-only; edits always land in today's slot.
"""

from __future__ import annotations

import hmac
import logging
from datetime import date, timezone, tzinfo

from adpulse.cache.base_cache_store import BaseAnalysisStore
from adpulse.cache.keys import check_fingerprint
from adpulse.cache.models import CacheEntry, HistoryItem
from adpulse.core.clock import Clock, today_in, utc_now
from adpulse.core.errors import AnalysisPipelineError

logger = logging.getLogger(__name__)


class EditNotAuthorizedError(AnalysisPipelineError):
    """Caller did not present the editor token."""


class AnalysisHistory:
    """Reader-writer over the analysis store for the history panel."""

    def __init__(
        self,
        store: BaseAnalysisStore,
        window_days: int = 30,
        *,
        editor_token: str = "",
        tz: tzinfo = timezone.utc,
        clock: Clock = utc_now,
    ) -> None:
        if window_days <= 0:
            raise ValueError("window_days must be > 0")
        self._store = store
        self._window_days = window_days
        self._editor_token = editor_token
        self._tz = tz
        self._clock = clock

    def today(self) -> date:
        return today_in(self._tz, self._clock)

    def is_editable(self, day: date) -> bool:
        """Only today's entry may be edited."""
        return day == self.today()

    async def list_history(self, fingerprint: str) -> list[HistoryItem]:
        """Days with a stored analysis in the trailing window, most recent first."""
        check_fingerprint(fingerprint)
        entries = await self._store.list_window(fingerprint, self._window_days, self.today())
        entries.sort(key=lambda e: e.day, reverse=True)
        return [e.to_history_item() for e in entries]

    async def read_by_day(self, fingerprint: str, day: date | None = None) -> str | None:
        """Text stored for ``day`` (default today), or None if there is none.

        Raises:
            StoreIOError: If the store could not be read.
        """
        entry = await self._store.get(day or self.today(), check_fingerprint(fingerprint))
        return entry.text if entry is not None else None

    async def save(
        self, fingerprint: str, text: str, token: str | None = None
    ) -> CacheEntry:
        """Overwrite today's analysis with an edited text.

        Raises:
            EditNotAuthorizedError: If an editor token is configured and not matched.
            ValueError: If the text is blank.
            StoreIOError: If the store could not be written.
        """
        check_fingerprint(fingerprint)
        if self._editor_token and not hmac.compare_digest(
            (token or "").encode(), self._editor_token.encode()
        ):
            raise EditNotAuthorizedError("editor token missing or invalid")
        if not text.strip():
            raise ValueError("edited analysis must not be blank")

        entry = await self._store.overwrite(self.today(), fingerprint, text)
        logger.info("Edited analysis saved for %s", fingerprint)
        return entry
