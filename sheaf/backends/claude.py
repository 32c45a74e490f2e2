"""Claude analysis backend — Anthropic API via httpx."""

from __future__ import annotations

import logging

import httpx

from sheaf.backends.base import UNREADABLE_RESPONSE_ERRORS, make_result
from sheaf.config import settings
from sheaf.errors import BackendError
from sheaf.models.analysis import AnalysisRequest, AnalysisResult
from sheaf.orchestrator.prompts import render_system_prompt, render_user_message

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-opus-4-6"


class ClaudeBackend:
    """Analysis backend using Anthropic's Claude API."""

    name: str = "Claude"
    provider_id: str = "claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model
        self._transport = transport

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run the analysis via Claude and return its markdown answer."""
        async with httpx.AsyncClient(
            timeout=settings.request_timeout, transport=self._transport
        ) as client:
            response = await client.post(
                ANTHROPIC_API_URL,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                    "content-type": "application/json",
                },
                json={
                    "model": self.model,
                    "max_tokens": 8192,
                    "system": render_system_prompt(request),
                    "messages": [
                        {"role": "user", "content": render_user_message(request)}
                    ],
                },
            )
            response.raise_for_status()

        try:
            data = response.json()
            raw_text = ""
            for block in data.get("content", []):
                if block.get("type") == "text":
                    raw_text = block["text"]
                    break
        except UNREADABLE_RESPONSE_ERRORS as exc:
            logger.warning("Claude: unreadable response body: %s", exc)
            raise BackendError(self.provider_id, str(exc)) from exc
        if not raw_text:
            logger.warning("Claude returned no text block")
        return make_result(self.provider_id, self.model, request, raw_text)
