from __future__ import annotations

import pytest

from adinsight_web.domain.errors import MalformedResponseError
from adinsight_web.domain.models import KPI_KEYS, DashboardData, SavedReport


def test_from_dict_keeps_display_strings_and_order(payload):
    data = DashboardData.from_dict(payload)

    assert set(data.kpis) == set(KPI_KEYS)
    assert data.kpis["spend"].value == "₩300,000"
    assert data.kpis["spend"].trend == "up"
    assert data.kpis["conversions"].change is None
    assert [p.date for p in data.daily_trend] == ["2024-05-01", "2024-05-02"]
    assert data.channel_performance[1].name == "Google"
    assert len(data.recommendations) == 3


def test_values_are_not_cross_checked(payload):
    # ROAS wildly inconsistent with spend/conversions is passed through untouched
    payload["kpis"]["roas"]["value"] = "99999%"
    payload["channelPerformance"][0]["roas"] = -5

    data = DashboardData.from_dict(payload)

    assert data.kpis["roas"].value == "99999%"
    assert data.channel_performance[0].roas == -5


def test_trend_order_is_not_resorted(payload):
    payload["dailyTrend"].reverse()
    data = DashboardData.from_dict(payload)
    assert [p.date for p in data.daily_trend] == ["2024-05-02", "2024-05-01"]


@pytest.mark.parametrize("field", ["kpis", "dailyTrend", "channelPerformance", "aiSummary", "recommendations"])
def test_missing_required_field_is_malformed(payload, field):
    del payload[field]
    with pytest.raises(MalformedResponseError):
        DashboardData.from_dict(payload)


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p["kpis"].pop("ctr"),
        lambda p: p["kpis"]["spend"].update(trend="sideways"),
        lambda p: p["kpis"]["spend"].update(value=300000),
        lambda p: p["dailyTrend"][0].update(cost="150000"),
        lambda p: p["dailyTrend"][0].update(clicks=True),
        lambda p: p["channelPerformance"].append("Instagram"),
        lambda p: p.update(recommendations="do better"),
        lambda p: p.update(aiSummary=None),
    ],
)
def test_structural_violations_are_malformed(payload, mutate):
    mutate(payload)
    with pytest.raises(MalformedResponseError):
        DashboardData.from_dict(payload)


def test_non_object_is_malformed():
    with pytest.raises(MalformedResponseError):
        DashboardData.from_dict(["not", "an", "object"])


def test_saved_report_document_uses_wire_names(dashboard):
    report = SavedReport(id="abc", title="t", date="2024-05-10T00:00:00.000Z", data=dashboard)

    doc = report.to_dict()

    assert doc["data"]["dailyTrend"][0]["cost"] == 150000
    assert "aiSummary" in doc["data"]
    assert SavedReport.from_dict(doc) == report
