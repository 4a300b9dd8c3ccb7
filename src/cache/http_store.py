# src/cache/http_store.py — v2
"""Client for the dashboard's analysis endpoint (CACHE_BACKEND=http).

The endpoint fronts the shared Redis instance:

    GET  {url}?dataKey=<fp>[&day=YYYY-MM-DD]  -> 200 {analysis, timestamp} | 404
    GET  {url}?dataKey=<fp>&days=<n>          -> 200 {entries: [{day, analysis, timestamp}]}
    POST {url} {dataKey, analysis[, day]}     -> 200 {analysis, timestamp}

404 is a miss. Any other status, any transport error and any 200 body that
does not have the shape above is a StoreIOError, so callers never confuse an
outage with an empty cache. TTL is enforced server side.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

import httpx

from adpulse.cache.base_cache_store import BaseAnalysisStore, StoreIOError
from adpulse.cache.keys import check_fingerprint
from adpulse.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class HttpAnalysisStore(BaseAnalysisStore):
    """Store backed by the remote analysis endpoint."""

    def __init__(
        self,
        api_url: str,
        default_ttl_s: int,
        timeout_s: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(default_ttl_s)
        self._url = api_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def get(self, day: date, fingerprint: str) -> CacheEntry | None:
        check_fingerprint(fingerprint)
        params = {"dataKey": fingerprint, "day": day.isoformat()}
        response = await self._request("GET", params=params)
        if response.status_code == 404:
            logger.debug("Remote cache MISS: %s@%s", fingerprint, day)
            return None
        entry = _entry_from(self._json(response), fingerprint, day)
        logger.debug("Remote cache HIT: %s@%s", fingerprint, day)
        return entry

    async def put(
        self,
        day: date,
        fingerprint: str,
        text: str,
        ttl_s: int | None = None,
    ) -> CacheEntry:
        check_fingerprint(fingerprint)
        if ttl_s is not None and ttl_s != self._default_ttl_s:
            logger.debug("Remote store ignores per-call TTL (%ds)", ttl_s)
        body = {"dataKey": fingerprint, "analysis": text, "day": day.isoformat()}
        response = await self._request("POST", json=body)
        if response.status_code == 404:
            raise StoreIOError(f"Analysis endpoint rejected write for {fingerprint}")
        data = self._json(response)
        try:
            generated_at = _parse_stamp(data.get("timestamp"))
        except (TypeError, ValueError) as e:
            raise StoreIOError(f"Analysis endpoint sent a bad timestamp: {e}") from e
        return CacheEntry(
            day=day, fingerprint=fingerprint, text=text, generated_at=generated_at
        )

    async def list_window(
        self,
        fingerprint: str,
        window_days: int,
        today: date,
    ) -> list[CacheEntry]:
        """Fetch the window in one request; fall back to per-day lookups."""
        check_fingerprint(fingerprint)
        params = {"dataKey": fingerprint, "days": str(window_days)}
        try:
            response = await self._request("GET", params=params)
            if response.status_code == 404:
                return []
            items = self._json(response).get("entries", [])
            if not isinstance(items, list):
                raise StoreIOError("Analysis endpoint sent non-list history entries")
            entries = [_entry_from(item, fingerprint) for item in items]
        except StoreIOError as e:
            logger.warning("History endpoint failed, scanning day by day: %s", e)
            return await super().list_window(fingerprint, window_days, today)

        entries.sort(key=lambda e: e.day, reverse=True)
        return entries

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, self._url, **kwargs)
        except httpx.HTTPError as e:
            raise StoreIOError(f"Analysis endpoint unreachable: {e}") from e
        if response.status_code not in (200, 404):
            raise StoreIOError(
                f"Analysis endpoint returned {response.status_code}: {response.text[:200]}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise StoreIOError(f"Analysis endpoint sent invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StoreIOError(
                f"Analysis endpoint sent {type(data).__name__}, expected an object"
            )
        return data


def _entry_from(payload: Any, fingerprint: str, day: date | None = None) -> CacheEntry:
    """Build an entry from an endpoint payload; ``day`` defaults to the payload's."""
    if not isinstance(payload, dict):
        raise StoreIOError(f"Analysis endpoint sent a malformed entry: {payload!r:.200}")
    text = payload.get("analysis")
    if not isinstance(text, str):
        raise StoreIOError("Analysis endpoint sent an entry without 'analysis'")
    try:
        entry_day = day or date.fromisoformat(payload["day"])
        generated_at = _parse_stamp(payload.get("timestamp"))
    except (KeyError, TypeError, ValueError) as e:
        raise StoreIOError(f"Analysis endpoint sent a malformed entry: {e!r}") from e
    return CacheEntry(
        day=entry_day, fingerprint=fingerprint, text=text, generated_at=generated_at
    )


def _parse_stamp(stamp: str | None) -> datetime:
    if not stamp:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(stamp.replace("Z", "+00:00"))
