"""Grok analysis backend — xAI API (OpenAI-compatible)."""

from __future__ import annotations

import logging

import httpx

from sheaf.backends.base import UNREADABLE_RESPONSE_ERRORS, make_result
from sheaf.config import settings
from sheaf.errors import BackendError
from sheaf.models.analysis import AnalysisRequest, AnalysisResult
from sheaf.orchestrator.prompts import render_system_prompt, render_user_message

logger = logging.getLogger(__name__)

XAI_API_URL = "https://api.x.ai/v1/chat/completions"
DEFAULT_MODEL = "grok-4-1-fast"


class GrokBackend:
    """Analysis backend using xAI's Grok API."""

    name: str = "Grok"
    provider_id: str = "grok"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.xai_api_key
        self.model = model
        self._transport = transport

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        async with httpx.AsyncClient(
            timeout=settings.request_timeout, transport=self._transport
        ) as client:
            response = await client.post(
                XAI_API_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": render_system_prompt(request)},
                        {"role": "user", "content": render_user_message(request)},
                    ],
                    "temperature": 0.7,
                },
            )
            response.raise_for_status()

        try:
            raw_text = response.json()["choices"][0]["message"]["content"] or ""
        except UNREADABLE_RESPONSE_ERRORS as exc:
            logger.warning("Grok: unreadable response body: %s", exc)
            raise BackendError(self.provider_id, str(exc)) from exc
        return make_result(self.provider_id, self.model, request, raw_text)
