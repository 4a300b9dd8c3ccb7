# src/cache/models.py — v2
"""Cache domain models: CacheEntry, HistoryItem."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """One persisted analysis, addressed by (day, fingerprint)."""

    day: date
    fingerprint: str
    text: str
    generated_at: datetime

    def to_history_item(self) -> HistoryItem:
        return HistoryItem(day=self.day, generated_at=self.generated_at)


class HistoryItem(BaseModel):
    """Listing row for the history view; the text is fetched on demand."""

    day: date
    generated_at: datetime
