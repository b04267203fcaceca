from __future__ import annotations

from typing import Any, Dict

from adinsight_web.domain.models import KPI_KEYS, REQUIRED_FIELDS

PROMPT_TEMPLATE = """\
You are an expert Data Analyst and Marketing Specialist.
I will provide you with raw advertising data pasted from a spreadsheet (CSV or TSV format).

Your task is to:
1. Parse the data intelligently. Identify columns for Date, Cost/Spend, Impressions, Clicks, Conversions, and Revenue/Value.
2. If columns are missing, infer reasonable defaults or zeros.
3. Aggregate the data to calculate overall KPIs: Total Spend, ROAS (Revenue/Spend), CPA (Spend/Conversions), CTR (Clicks/Impressions), Total Conversions, Total Clicks.
4. Create a daily trend dataset (aggregated by date), in chronological order.
5. If there is a 'Campaign', 'Source', or 'Platform' column, categorize performance by channel. If not, treat everything as "General".
6. Provide a concise summary of the performance in KOREAN.
7. Provide 3 actionable recommendations in KOREAN.

Format KPI values as display strings (currency with ₩ and thousands separators, rates as percentages).

RAW DATA:
{raw_data}
"""

_KPI_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "label": {"type": "STRING"},
        "value": {"type": "STRING"},
        "change": {"type": "STRING"},
        "trend": {"type": "STRING", "enum": ["up", "down", "neutral"]},
    },
    "required": ["label", "value"],
}

DASHBOARD_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "kpis": {
            "type": "OBJECT",
            "properties": {k: _KPI_SCHEMA for k in KPI_KEYS},
            "required": list(KPI_KEYS),
        },
        "dailyTrend": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "date": {"type": "STRING"},
                    "cost": {"type": "NUMBER"},
                    "conversions": {"type": "NUMBER"},
                    "clicks": {"type": "NUMBER"},
                    "impressions": {"type": "NUMBER"},
                },
                "required": ["date", "cost", "conversions", "clicks", "impressions"],
            },
        },
        "channelPerformance": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "spend": {"type": "NUMBER"},
                    "roas": {"type": "NUMBER"},
                    "conversions": {"type": "NUMBER"},
                },
                "required": ["name", "spend", "roas", "conversions"],
            },
        },
        "aiSummary": {"type": "STRING"},
        "recommendations": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": list(REQUIRED_FIELDS),
}


def build_prompt(raw_data: str) -> str:
    return PROMPT_TEMPLATE.format(raw_data=(raw_data or "").strip())
