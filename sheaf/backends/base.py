"""Base protocol for all analysis backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sheaf.models.analysis import AnalysisRequest, AnalysisResult

# Raised while digging the answer out of a 200 response with an unexpected
# body; json.JSONDecodeError is a ValueError
UNREADABLE_RESPONSE_ERRORS = (ValueError, KeyError, IndexError, TypeError, AttributeError)


@runtime_checkable
class AnalysisBackend(Protocol):
    """Interface that all LLM analysis backends must implement."""

    name: str
    provider_id: str

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run an analysis request and return the backend's answer."""
        ...


def strip_code_fence(raw_text: str) -> str:
    """Unwrap an answer the model wrapped in a single ``` fence."""
    text = raw_text.strip()
    if text.startswith("```") and text.endswith("```") and "\n" in text:
        text = text.split("\n", 1)[1]
        text = text.rsplit("```", 1)[0]
    return text.strip()


def make_result(provider_id: str, model: str, request: AnalysisRequest, raw_text: str) -> AnalysisResult:
    return AnalysisResult(
        provider=provider_id,
        content=strip_code_fence(raw_text),
        model=model,
        source_ids=[s.id for s in request.sources],
        raw_response=raw_text,
    )
