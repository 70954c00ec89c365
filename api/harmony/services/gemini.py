"""Minimal async client for the Gemini generateContent endpoint."""

import json
import re

import httpx

from harmony.core.config import settings
from harmony.core.errors import ConfigurationError

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class GeminiClient:
    def __init__(self, api_key: str | None = None, model: str | None = None, base_url: str | None = None):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.base_url = base_url or settings.gemini_api_url

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def generate_content(self, prompt: str, temperature: float = 0.7) -> str:
        if not self.available:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": 1000,
                "topK": 40,
                "topP": 0.95,
            },
        }
        async with httpx.AsyncClient(timeout=60) as client:
            resp = await client.post(
                f"{self.base_url}/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()

        candidates = data.get("candidates") or []
        if not candidates:
            raise ValueError("No response from Gemini API")
        return candidates[0]["content"]["parts"][0]["text"]

    async def generate_json(self, prompt: str, temperature: float = 0.7) -> dict:
        """Like ``generate_content`` but parses the reply, tolerating ```json fences."""
        text = await self.generate_content(prompt, temperature)
        return json.loads(_FENCE.sub("", text.strip()))
