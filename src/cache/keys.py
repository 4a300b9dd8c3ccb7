# src/cache/keys.py — v1
"""Storage key scheme shared by every backend.

    analysis:{YYYY-MM-DD}:{fingerprint}
    analysis:{YYYY-MM-DD}:{fingerprint}:timestamp

Both keys of a pair are written with the same TTL.
"""

from __future__ import annotations

import re
from datetime import date

KEY_PREFIX = "analysis"
TIMESTAMP_SUFFIX = "timestamp"
KEY_DELIMITER = ":"

_KEY_RE = re.compile(r"^analysis:(\d{4}-\d{2}-\d{2}):([^:]+)$")


class InvalidFingerprintError(ValueError):
    """Raised when a fingerprint cannot be embedded in a storage key."""


def check_fingerprint(fingerprint: str) -> str:
    if not fingerprint:
        raise InvalidFingerprintError("fingerprint must not be empty")
    if KEY_DELIMITER in fingerprint:
        raise InvalidFingerprintError(
            f"fingerprint must not contain {KEY_DELIMITER!r}: {fingerprint!r}"
        )
    return fingerprint


def analysis_key(day: date, fingerprint: str) -> str:
    """Return the text key for (day, fingerprint)."""
    check_fingerprint(fingerprint)
    return f"{KEY_PREFIX}:{day.isoformat()}:{fingerprint}"


def timestamp_key(day: date, fingerprint: str) -> str:
    """Return the generation-timestamp key paired with analysis_key()."""
    return f"{analysis_key(day, fingerprint)}:{TIMESTAMP_SUFFIX}"


def parse_analysis_key(key: str) -> tuple[date, str] | None:
    """Split a text key back into (day, fingerprint). Timestamp keys return None."""
    match = _KEY_RE.match(key)
    if not match:
        return None
    try:
        day = date.fromisoformat(match.group(1))
    except ValueError:
        return None
    return day, match.group(2)
