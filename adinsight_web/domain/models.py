######## models.py
########

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from adinsight_web.domain.errors import MalformedResponseError

KPI_KEYS: Tuple[str, ...] = ("spend", "roas", "cpa", "ctr", "conversions", "clicks")
TREND_VALUES = {"up", "down", "neutral"}

REQUIRED_FIELDS: Tuple[str, ...] = (
    "kpis",
    "dailyTrend",
    "channelPerformance",
    "aiSummary",
    "recommendations",
)


class AnalysisStatus(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


class AppView(str, Enum):
    ANALYSIS = "analysis"
    LOGIN = "login"
    ADMIN = "admin"


class ConfigSource(str, Enum):
    ENVIRONMENT = "env"
    LOCAL = "local"


def _require_mapping(raw: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise MalformedResponseError(f"{where} must be an object.")
    return raw


def _require_list(raw: Any, where: str) -> list:
    if not isinstance(raw, list):
        raise MalformedResponseError(f"{where} must be an array.")
    return raw


def _number(raw: Any, where: str) -> float:
    # bool is an int subclass; a true/false here is a schema violation
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedResponseError(f"{where} must be a number.")
    return raw


def _text(raw: Any, where: str) -> str:
    if not isinstance(raw, str):
        raise MalformedResponseError(f"{where} must be a string.")
    return raw


def _optional_text(raw: Any, where: str) -> Optional[str]:
    if raw is None:
        return None
    return _text(raw, where)


@dataclass(frozen=True)
class KPIMetric:
    label: str
    value: str                   # pre-formatted display string, e.g. "₩300,000"
    change: Optional[str] = None  # e.g. "+12%"
    trend: Optional[str] = None   # "up" | "down" | "neutral"
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any, where: str = "kpi") -> "KPIMetric":
        raw = _require_mapping(raw, where)
        trend = _optional_text(raw.get("trend"), f"{where}.trend")
        if trend is not None and trend not in TREND_VALUES:
            raise MalformedResponseError(f"{where}.trend must be one of up/down/neutral.")
        return cls(
            label=_text(raw.get("label"), f"{where}.label"),
            value=_text(raw.get("value"), f"{where}.value"),
            change=_optional_text(raw.get("change"), f"{where}.change"),
            trend=trend,
            description=_optional_text(raw.get("description"), f"{where}.description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"label": self.label, "value": self.value}
        if self.change is not None:
            out["change"] = self.change
        if self.trend is not None:
            out["trend"] = self.trend
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass(frozen=True)
class TrendPoint:
    date: str
    cost: float
    conversions: float
    clicks: float
    impressions: float

    @classmethod
    def from_dict(cls, raw: Any, where: str = "dailyTrend[]") -> "TrendPoint":
        raw = _require_mapping(raw, where)
        return cls(
            date=_text(raw.get("date"), f"{where}.date"),
            cost=_number(raw.get("cost"), f"{where}.cost"),
            conversions=_number(raw.get("conversions"), f"{where}.conversions"),
            clicks=_number(raw.get("clicks"), f"{where}.clicks"),
            impressions=_number(raw.get("impressions"), f"{where}.impressions"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "cost": self.cost,
            "conversions": self.conversions,
            "clicks": self.clicks,
            "impressions": self.impressions,
        }


@dataclass(frozen=True)
class ChannelPerformance:
    name: str
    spend: float
    roas: float
    conversions: float

    @classmethod
    def from_dict(cls, raw: Any, where: str = "channelPerformance[]") -> "ChannelPerformance":
        raw = _require_mapping(raw, where)
        return cls(
            name=_text(raw.get("name"), f"{where}.name"),
            spend=_number(raw.get("spend"), f"{where}.spend"),
            roas=_number(raw.get("roas"), f"{where}.roas"),
            conversions=_number(raw.get("conversions"), f"{where}.conversions"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "spend": self.spend,
            "roas": self.roas,
            "conversions": self.conversions,
        }


@dataclass(frozen=True)
class DashboardData:
    """
    One analysis result, as returned by the model.

    Values are taken as-is: nothing here recomputes or cross-checks a KPI
    against the trend or channel numbers.
    """
    kpis: Dict[str, KPIMetric]
    daily_trend: List[TrendPoint] = field(default_factory=list)
    channel_performance: List[ChannelPerformance] = field(default_factory=list)
    ai_summary: str = ""
    recommendations: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "DashboardData":
        raw = _require_mapping(raw, "response")

        missing = [name for name in REQUIRED_FIELDS if name not in raw]
        if missing:
            raise MalformedResponseError(f"Missing required fields: {', '.join(missing)}")

        kpis_raw = _require_mapping(raw["kpis"], "kpis")
        missing_kpis = [k for k in KPI_KEYS if k not in kpis_raw]
        if missing_kpis:
            raise MalformedResponseError(f"Missing KPIs: {', '.join(missing_kpis)}")

        kpis = {k: KPIMetric.from_dict(kpis_raw[k], f"kpis.{k}") for k in KPI_KEYS}
        daily_trend = [
            TrendPoint.from_dict(p, f"dailyTrend[{i}]")
            for i, p in enumerate(_require_list(raw["dailyTrend"], "dailyTrend"))
        ]
        channels = [
            ChannelPerformance.from_dict(c, f"channelPerformance[{i}]")
            for i, c in enumerate(_require_list(raw["channelPerformance"], "channelPerformance"))
        ]
        recommendations = [
            _text(r, f"recommendations[{i}]")
            for i, r in enumerate(_require_list(raw["recommendations"], "recommendations"))
        ]

        return cls(
            kpis=kpis,
            daily_trend=daily_trend,
            channel_performance=channels,
            ai_summary=_text(raw["aiSummary"], "aiSummary"),
            recommendations=recommendations,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kpis": {k: m.to_dict() for k, m in self.kpis.items()},
            "dailyTrend": [p.to_dict() for p in self.daily_trend],
            "channelPerformance": [c.to_dict() for c in self.channel_performance],
            "aiSummary": self.ai_summary,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class SavedReport:
    id: str
    title: str
    date: str                   # ISO-8601, UTC
    data: DashboardData

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SavedReport":
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            date=str(raw.get("date") or ""),
            data=DashboardData.from_dict(raw.get("data")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "data": self.data.to_dict(),
        }


@dataclass(frozen=True)
class BackendConfig:
    url: str
    key: str
    source: ConfigSource

    @property
    def is_env_managed(self) -> bool:
        return self.source is ConfigSource.ENVIRONMENT
