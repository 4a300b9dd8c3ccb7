# src/core/clock.py — v1
"""Wall-clock helpers. Components take a ``clock`` callable so tests can pin time."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_in(tz: tzinfo, clock: Clock = utc_now) -> date:
    """Calendar day of ``clock()`` in ``tz``; the day partition entries are filed under."""
    return clock().astimezone(tz).date()
