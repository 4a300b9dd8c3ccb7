# src/cache/json_store.py — v2
"""JSON file-based analysis store (CACHE_BACKEND=json).

One file per (day, fingerprint) under CACHE_ROOT holding the text, the
generation timestamp and the expiry instant. Writing prunes day partitions
that fell out of the retention window.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime, timedelta
from pathlib import Path

from adpulse.cache.base_cache_store import BaseAnalysisStore, StoreIOError
from adpulse.cache.keys import analysis_key, parse_analysis_key
from adpulse.cache.models import CacheEntry
from adpulse.core.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class JsonAnalysisStore(BaseAnalysisStore):
    """File-based store using JSON documents."""

    def __init__(
        self,
        cache_root: Path | str,
        default_ttl_s: int,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(default_ttl_s)
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    async def get(self, day: date, fingerprint: str) -> CacheEntry | None:
        path = self._entry_path(day, fingerprint)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Discarding corrupt cache file %s: %s", path.name, e)
            path.unlink(missing_ok=True)
            return None
        except OSError as e:
            raise StoreIOError(f"Cannot read {path}: {e}") from e

        expires_at = datetime.fromisoformat(data["expires_at"])
        if expires_at <= self._clock():
            path.unlink(missing_ok=True)
            return None

        return CacheEntry(
            day=day,
            fingerprint=fingerprint,
            text=data["text"],
            generated_at=datetime.fromisoformat(data["generated_at"]),
        )

    async def put(
        self,
        day: date,
        fingerprint: str,
        text: str,
        ttl_s: int | None = None,
    ) -> CacheEntry:
        now = self._clock()
        ttl = ttl_s or self._default_ttl_s
        payload = {
            "key": analysis_key(day, fingerprint),
            "text": text,
            "generated_at": now.isoformat(),
            "expires_at": (now + timedelta(seconds=ttl)).isoformat(),
        }
        path = self._entry_path(day, fingerprint)
        try:
            path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreIOError(f"Cannot write {path}: {e}") from e

        self.prune(keep_days=math.ceil(ttl / 86_400))
        return CacheEntry(day=day, fingerprint=fingerprint, text=text, generated_at=now)

    def prune(self, keep_days: int) -> int:
        """Remove files whose day partition is older than keep_days. Returns count."""
        cutoff = self._clock().date() - timedelta(days=keep_days)
        removed = 0
        for path in self._root.glob("analysis_*.json"):
            parsed = parse_analysis_key(_key_from_filename(path.name))
            if parsed is None:
                continue
            day, _ = parsed
            if day < cutoff:
                path.unlink(missing_ok=True)
                removed += 1
                logger.debug("Pruned old analysis %s", path.name)
        return removed

    def _entry_path(self, day: date, fingerprint: str) -> Path:
        safe_key = analysis_key(day, fingerprint).replace(":", "_", 2)
        safe_key = safe_key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"


def _key_from_filename(name: str) -> str:
    # analysis_2025-12-08_fp.json -> analysis:2025-12-08:fp
    stem = name[: -len(".json")]
    return stem.replace("_", ":", 2)
