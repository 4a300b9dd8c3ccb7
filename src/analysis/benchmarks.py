# src/analysis/benchmarks.py — v1
"""Benchmark KPI tables injected by the hosting dashboard.

Values are percentages (25.0 == 25%). Lookup falls back from
vehicle + purchase type to the client-wide general KPIs.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field


class BenchmarkKPIs(BaseModel):
    vtr: float
    ctr: float
    engagement_rate: float


class VehicleBenchmark(BaseModel):
    vehicle: str
    kpis: BenchmarkKPIs
    purchase_types: dict[str, BenchmarkKPIs] = Field(default_factory=dict)


class BenchmarkTable(BaseModel):
    """Client benchmark configuration."""

    general: BenchmarkKPIs = BenchmarkKPIs(vtr=25.0, ctr=1.0, engagement_rate=2.0)
    vehicles: list[VehicleBenchmark] = Field(default_factory=list)

    def for_vehicle(self, vehicle: str) -> VehicleBenchmark | None:
        for item in self.vehicles:
            if item.vehicle == vehicle:
                return item
        return None

    def for_group(self, vehicle: str, purchase_type: str) -> BenchmarkKPIs:
        """Most specific KPIs for (vehicle, purchase type)."""
        item = self.for_vehicle(vehicle)
        if item is None:
            return self.general
        return item.purchase_types.get(purchase_type, item.kpis)

    @classmethod
    def from_file(cls, path: Path | str) -> BenchmarkTable:
        """Load a table from a JSON document."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)
