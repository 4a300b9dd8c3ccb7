# src/analysis/models.py — v1
"""Analysis domain models: CampaignRecord, VehicleMetrics, AnalysisResult."""

from __future__ import annotations

import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class CampaignRecord(BaseModel):
    """One parsed spreadsheet row.

    Accepts snake_case field names as well as the spreadsheet column headers
    ("Impressions", "Veículo", "Tipo de Compra", ...).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date: dt.date = Field(validation_alias=_alias("date", "Date"))
    campaign_name: str = Field(
        default="", validation_alias=_alias("campaign_name", "Campaign name")
    )
    ad_set_name: str = Field(default="", validation_alias=_alias("ad_set_name", "Ad Set Name"))
    ad_name: str = Field(default="", validation_alias=_alias("ad_name", "Ad Name"))
    impressions: float = Field(default=0, validation_alias=_alias("impressions", "Impressions"))
    clicks: float = Field(default=0, validation_alias=_alias("clicks", "Clicks"))
    video_views: float = Field(default=0, validation_alias=_alias("video_views", "Video views"))
    video_completions: float = Field(
        default=0, validation_alias=_alias("video_completions", "Video completions")
    )
    total_engagements: float = Field(
        default=0, validation_alias=_alias("total_engagements", "Total engagements")
    )
    vehicle: str = Field(default="", validation_alias=_alias("vehicle", "Veículo", "veiculo"))
    purchase_type: str = Field(
        default="", validation_alias=_alias("purchase_type", "Tipo de Compra", "tipoDeCompra")
    )
    campaign: str = Field(default="", validation_alias=_alias("campaign", "Campanha", "campanha"))

    @field_validator(
        "impressions", "clicks", "video_views", "video_completions", "total_engagements",
        mode="before",
    )
    @classmethod
    def blank_as_zero(cls, v: object) -> object:  # noqa: N805
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v


class VehicleMetrics(BaseModel):
    """Totals and rates for one (vehicle, purchase type) grouping. Rates in percent."""

    vehicle: str
    purchase_type: str
    impressions: float = 0
    clicks: float = 0
    video_views: float = 0
    video_completions: float = 0
    engagements: float = 0
    ctr: float = 0.0
    vtr: float = 0.0
    engagement_rate: float = 0.0

    @property
    def group_key(self) -> tuple[str, str]:
        return (self.vehicle, self.purchase_type)


class AnalysisResult(BaseModel):
    """What the dashboard displays for one ensure_analysis() call."""

    text: str
    was_cached: bool
    generated_at: dt.datetime
    backend_id: str | None = None
    persisted: bool = True
