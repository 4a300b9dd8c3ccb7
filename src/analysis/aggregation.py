# src/analysis/aggregation.py — v1
"""Per-vehicle aggregation and comparison-period selection."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Sequence

from adpulse.analysis.models import CampaignRecord, VehicleMetrics


def aggregate_by_vehicle(records: Iterable[CampaignRecord]) -> list[VehicleMetrics]:
    """Group records by (vehicle, purchase type) and compute rates.

    Groups keep first-seen order. Rates stay at zero when a group has no
    impressions.
    """
    grouped: dict[tuple[str, str], VehicleMetrics] = {}
    for record in records:
        key = (record.vehicle, record.purchase_type)
        metrics = grouped.get(key)
        if metrics is None:
            metrics = VehicleMetrics(vehicle=record.vehicle, purchase_type=record.purchase_type)
            grouped[key] = metrics
        metrics.impressions += record.impressions
        metrics.clicks += record.clicks
        metrics.video_views += record.video_views
        metrics.video_completions += record.video_completions
        metrics.engagements += record.total_engagements

    for metrics in grouped.values():
        if metrics.impressions > 0:
            metrics.ctr = metrics.clicks / metrics.impressions * 100
            metrics.vtr = metrics.video_completions / metrics.impressions * 100
            metrics.engagement_rate = metrics.engagements / metrics.impressions * 100

    return list(grouped.values())


def previous_period(
    current: Sequence[CampaignRecord],
    historical: Iterable[CampaignRecord],
    days: int = 7,
) -> list[CampaignRecord]:
    """Records of the period immediately preceding ``current``.

    The window is the current period's [min date, max date] shifted back by
    ``days``, bounds inclusive. Empty when ``current`` is empty.
    """
    if not current:
        return []
    start = min(r.date for r in current) - timedelta(days=days)
    end = max(r.date for r in current) - timedelta(days=days)
    return [r for r in historical if start <= r.date <= end]
