from __future__ import annotations

from typing import Any, Dict, Optional

from google import genai
from google.genai import types

DEFAULT_MODEL = "gemini-2.5-flash"


class LlmClient:
    """Port: one prompt in, one JSON document (as text) out."""
    def generate_json(self, prompt: str, schema: Dict[str, Any], temperature: float) -> Optional[str]:
        raise NotImplementedError


class GeminiClient(LlmClient):
    def __init__(self, api_key: str, model: str = DEFAULT_MODEL):
        self.model = model
        self._client = genai.Client(api_key=api_key)

    def generate_json(self, prompt: str, schema: Dict[str, Any], temperature: float) -> Optional[str]:
        response = self._client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
                temperature=temperature,
            ),
        )
        return response.text
