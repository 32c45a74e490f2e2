"""Analysis options, request and result data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sheaf.models.source import SourceRecord


class AnalysisType(Enum):
    SYNTHESIS = "synthesis"
    COMPARISON = "comparison"
    SUMMARY = "summary"
    CUSTOM = "custom"


class OutputFormat(Enum):
    MARKDOWN = "markdown"


@dataclass
class AnalysisOptions:
    """User selection state, read only when a request is built."""

    provider: str
    analysis_type: AnalysisType = AnalysisType.SYNTHESIS
    custom_prompt: str = ""
    output_format: OutputFormat = OutputFormat.MARKDOWN
    language: str | None = None

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "analysis_type": self.analysis_type.value,
            "custom_prompt": self.custom_prompt,
            "output_format": self.output_format.value,
            "language": self.language,
        }


@dataclass(frozen=True)
class AnalysisRequest:
    """Immutable payload handed to an analysis backend."""

    sources: tuple[SourceRecord, ...]
    analysis_type: AnalysisType
    custom_prompt: str
    output_format: OutputFormat
    language: str
    provider: str
    include_source_references: bool = True

    def to_dict(self) -> dict:
        return {
            "sources": [s.to_dict() for s in self.sources],
            "analysis_type": self.analysis_type.value,
            "custom_prompt": self.custom_prompt,
            "output_format": self.output_format.value,
            "include_source_references": self.include_source_references,
            "language": self.language,
            "provider": self.provider,
        }


@dataclass
class AnalysisResult:
    """Result returned by an analysis backend."""

    provider: str
    content: str
    model: str = ""
    source_ids: list[str] = field(default_factory=list)
    raw_response: str = ""

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "content": self.content,
            "model": self.model,
            "source_ids": list(self.source_ids),
        }
