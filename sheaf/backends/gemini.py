"""Gemini analysis backend — Google Generative Language API."""

from __future__ import annotations

import logging

import httpx

from sheaf.backends.base import UNREADABLE_RESPONSE_ERRORS, make_result
from sheaf.config import settings
from sheaf.errors import BackendError
from sheaf.models.analysis import AnalysisRequest, AnalysisResult
from sheaf.orchestrator.prompts import render_system_prompt, render_user_message

logger = logging.getLogger(__name__)

GENERATE_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-2.5-pro"


class GeminiBackend:
    """Analysis backend using Google's Gemini models."""

    name: str = "Gemini"
    provider_id: str = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_api_key
        self.model = model
        self._transport = transport

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        async with httpx.AsyncClient(
            timeout=settings.request_timeout, transport=self._transport
        ) as client:
            response = await client.post(
                GENERATE_URL.format(model=self.model),
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json={
                    "systemInstruction": {
                        "parts": [{"text": render_system_prompt(request)}]
                    },
                    "contents": [
                        {
                            "role": "user",
                            "parts": [{"text": render_user_message(request)}],
                        }
                    ],
                },
            )
            response.raise_for_status()

        try:
            raw_text = self._extract_output(response.json())
        except UNREADABLE_RESPONSE_ERRORS as exc:
            logger.warning("Gemini: unreadable response body: %s", exc)
            raise BackendError(self.provider_id, str(exc)) from exc
        return make_result(self.provider_id, self.model, request, raw_text)

    def _extract_output(self, data: dict) -> str:
        """Concatenate the text parts of the first candidate."""
        candidates = data.get("candidates", [])
        if not candidates:
            logger.warning("Gemini returned no candidates: %s", data.get("promptFeedback"))
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))
