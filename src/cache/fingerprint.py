# src/cache/fingerprint.py — v4
"""Dataset fingerprinting for the analysis cache.

A fingerprint stands in for "this filtered dataset, right now". It is built
from the selected campaign, the row count and the impression sum only, so two
datasets with the same count and sum share a fingerprint even when individual
rows differ. That collision is accepted: the narrative is reused rather than
paying for a second generation.

The selection is percent-encoded (RFC 3986 unreserved characters kept), so
distinct campaign names stay distinct and the key delimiter ":" never
appears: "Summer Sale" becomes "Summer%20Sale", "Summer_Sale" stays as is.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable
from urllib.parse import quote

if TYPE_CHECKING:
    from adpulse.analysis.models import CampaignRecord

ALL_SELECTION = "all"


def derive_fingerprint(
    selection_id: str | None,
    row_count: int,
    total_impressions: float,
) -> str:
    """Compute the cache fingerprint for a filtered dataset.

    Args:
        selection_id: Selected campaign, or None for "all campaigns".
        row_count: Number of records in the filtered dataset.
        total_impressions: Sum of impressions over those records.

    Returns:
        String of the form ``{selection}-{rows}-{impressions}``, safe to embed
        in a colon-delimited storage key.
    """
    selection = _normalize_selection(selection_id)
    return f"{selection}-{int(row_count)}-{_format_number(total_impressions)}"


def fingerprint_for_records(
    records: Iterable[CampaignRecord],
    selection_id: str | None = None,
) -> str:
    """Derive the fingerprint straight from parsed records."""
    count = 0
    impressions = 0.0
    for record in records:
        count += 1
        impressions += record.impressions
    return derive_fingerprint(selection_id, count, impressions)


def _normalize_selection(selection_id: str | None) -> str:
    if selection_id is None:
        return ALL_SELECTION
    cleaned = selection_id.strip()
    return quote(cleaned, safe="") if cleaned else ALL_SELECTION


def _format_number(value: float) -> str:
    """Render integral values without a decimal point (1582340, not 1582340.0)."""
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise ValueError(f"impression total must be finite, got {value!r}")
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
