from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from adinsight_web.config.ini_config import AppSettings
from adinsight_web.domain.models import DashboardData
from adinsight_web.repositories.local_store import LocalStoreError


def dashboard_payload(spend_value: str = "₩300,000") -> Dict[str, Any]:
    return {
        "kpis": {
            "spend": {"label": "총 비용", "value": spend_value, "change": "+12%", "trend": "up"},
            "roas": {"label": "ROAS", "value": "412%", "change": "+3%", "trend": "up"},
            "cpa": {"label": "CPA", "value": "₩15,000", "change": "-2%", "trend": "down"},
            "ctr": {"label": "CTR", "value": "2.4%", "trend": "neutral"},
            "conversions": {"label": "총 전환", "value": "20"},
            "clicks": {"label": "클릭 수", "value": "730"},
        },
        "dailyTrend": [
            {"date": "2024-05-01", "cost": 150000, "conversions": 15, "clicks": 450, "impressions": 25000},
            {"date": "2024-05-02", "cost": 150000, "conversions": 5, "clicks": 280, "impressions": 4000},
        ],
        "channelPerformance": [
            {"name": "Instagram", "spend": 150000, "roas": 4.3, "conversions": 15},
            {"name": "Google", "spend": 150000, "roas": 8.0, "conversions": 5},
        ],
        "aiSummary": "Instagram 채널의 성과가 안정적입니다.",
        "recommendations": ["예산을 재배분하세요.", "소재를 교체하세요.", "키워드를 확장하세요."],
    }


@pytest.fixture
def payload() -> Dict[str, Any]:
    return copy.deepcopy(dashboard_payload())


@pytest.fixture
def dashboard(payload) -> DashboardData:
    return DashboardData.from_dict(payload)


# -----------------------------
# Test doubles
# -----------------------------
class FakeKeyValueStore:
    """In-memory LocalKeyValueStore with switchable failures."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.docs: Dict[str, Any] = copy.deepcopy(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> Optional[Any]:
        if self.fail_reads:
            raise LocalStoreError("read refused")
        return copy.deepcopy(self.docs.get(key))

    def set(self, key: str, value: Any) -> None:
        if self.fail_writes:
            raise LocalStoreError("QuotaExceededError")
        self.writes += 1
        self.docs[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise LocalStoreError("remove refused")
        self.docs.pop(key, None)


@pytest.fixture
def kv() -> FakeKeyValueStore:
    return FakeKeyValueStore()


def make_settings(tmp_path: Path, **overrides: Any) -> AppSettings:
    values = dict(
        data_file=tmp_path / "store.json",
        gemini_api_key="test-key",
        gemini_model="gemini-2.5-flash",
        gemini_temperature=0.2,
        demo_delay_seconds=1.5,
        admin_password="admin1234",
        flask_host="127.0.0.1",
        flask_port=5000,
        flask_debug=False,
        secret_key="test-secret",
    )
    values.update(overrides)
    return AppSettings(**values)
