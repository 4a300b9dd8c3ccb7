# src/analysis/prompt.py — v1
"""Prompt for the weekly performance narrative."""

from __future__ import annotations

from datetime import date
from typing import Sequence

from adpulse.analysis.aggregation import aggregate_by_vehicle
from adpulse.analysis.benchmarks import BenchmarkTable
from adpulse.analysis.models import CampaignRecord, VehicleMetrics

_TEMPLATE = """\
You are a senior media performance analyst.
Analyze the week starting on {week_start}.

WEEK DATA:
{groups}

ANALYSIS GUIDELINES:
1. Compare overall performance (CTR, VTR, engagement) per campaign against the benchmark. Are we above or below?
2. If "Previous week" data is present, say whether each metric improved or declined.
3. Highlight each vehicle and purchase type with the same logic (first vs benchmark, then vs previous week), using the benchmark for that vehicle and purchase type.
4. Point out vehicles or purchase types that need attention or optimization.

RESPONSE FORMAT:
- At most 2 paragraphs, written in {language}.
- Be direct and analytical; prefer flowing prose over bullet lists.
- Focus on actionable insights: what improved, what got worse.
- Lead with the most important point.
"""


def build_analysis_prompt(
    current: Sequence[CampaignRecord],
    previous: Sequence[CampaignRecord] | None,
    benchmarks: BenchmarkTable,
    language: str = "Brazilian Portuguese",
) -> str:
    """Render the prompt comparing the current week with benchmarks and the prior week.

    Args:
        current: Records of the period being analyzed (non-empty).
        previous: Records of the preceding period, or None/empty when absent.
        benchmarks: KPI targets per vehicle and purchase type.
        language: Language the narrative must be written in.
    """
    current_metrics = aggregate_by_vehicle(current)
    previous_by_group = {
        m.group_key: m for m in aggregate_by_vehicle(previous or [])
    }

    week_start = min(r.date for r in current) if current else date.today()
    groups = "\n".join(
        _describe_group(m, benchmarks, previous_by_group.get(m.group_key))
        for m in current_metrics
    )
    return _TEMPLATE.format(
        week_start=week_start.strftime("%d/%m/%Y"),
        groups=groups,
        language=language,
    )


def _describe_group(
    current: VehicleMetrics,
    benchmarks: BenchmarkTable,
    previous: VehicleMetrics | None,
) -> str:
    bench = benchmarks.for_group(current.vehicle, current.purchase_type)
    lines = [
        f"- Vehicle: {current.vehicle} | Purchase type: {current.purchase_type}",
        "  Current performance: " + _rates(current.ctr, current.vtr, current.engagement_rate),
        "  Benchmark (target): " + _rates(bench.ctr, bench.vtr, bench.engagement_rate),
    ]
    if previous is not None:
        lines.append(
            "  Previous week: " + _rates(previous.ctr, previous.vtr, previous.engagement_rate)
        )
    else:
        lines.append("  Previous week: no data")
    return "\n".join(lines)


def _rates(ctr: float, vtr: float, engagement: float) -> str:
    return f"CTR {ctr:.2f}%, VTR {vtr:.2f}%, Engagement {engagement:.2f}%"
