from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from adinsight_web.adapters.llm_gemini import LlmClient
from adinsight_web.domain.errors import (
    AdInsightError,
    ConfigurationError,
    MalformedResponseError,
    ProviderError,
    ValidationError,
)
from adinsight_web.domain.models import DashboardData
from adinsight_web.services.prompt_builder import DASHBOARD_SCHEMA, build_prompt

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


def parse_dashboard(text: Optional[str]) -> DashboardData:
    """
    Turns the model's response body into DashboardData.
    Structure is checked; the numbers themselves are taken on trust.
    """
    body = (text or "").strip()
    if not body:
        raise MalformedResponseError("AI 응답이 비어 있습니다.", detail="No response text generated")

    m = _FENCED_JSON.search(body)
    if m:
        body = m.group(1)

    try:
        raw = json.loads(body)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(detail=f"Invalid JSON: {e}") from e

    try:
        return DashboardData.from_dict(raw)
    except MalformedResponseError as e:
        raise MalformedResponseError(detail=e.message) from e


@dataclass
class AnalysisService:
    """
    Service layer: prompt -> model call -> validated DashboardData.
    Keeps controllers/routes thin. Does not retry; the UI offers that.
    """
    api_key: str
    llm_factory: Callable[[str], LlmClient]
    temperature: float = 0.2

    def analyze(self, raw_text: str) -> DashboardData:
        if not (raw_text or "").strip():
            raise ValidationError("분석할 데이터를 입력해주세요.")

        api_key = (self.api_key or "").strip()
        if not api_key:
            raise ConfigurationError()

        prompt = build_prompt(raw_text)

        try:
            client = self.llm_factory(api_key)
            text = client.generate_json(prompt, DASHBOARD_SCHEMA, self.temperature)
        except AdInsightError:
            raise
        except Exception as e:
            logger.exception("Gemini analysis error")
            if "api key" in str(e).lower() or "api_key" in str(e).lower():
                raise ProviderError("API Key 오류: 키가 올바르게 설정되지 않았습니다.", detail=str(e)) from e
            raise ProviderError(detail=str(e)) from e

        data = parse_dashboard(text)
        logger.info(
            "Analysis complete: %d trend points, %d channels",
            len(data.daily_trend),
            len(data.channel_performance),
        )
        return data
