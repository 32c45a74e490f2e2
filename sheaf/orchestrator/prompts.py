"""Prompt rendering for analysis requests."""

from __future__ import annotations

from sheaf.models.analysis import AnalysisRequest, AnalysisType
from sheaf.models.source import NoteMetadata, SourceRecord, WebClipMetadata

SYSTEM_PROMPT = """\
You are an analysis assistant. You receive several source documents (web \
clippings, notes, selected passages and typed text) and an analysis \
instruction, and you produce a single well-structured analysis.

Rules:
- Write the whole answer in {language}.
- Format the answer as {output_format}.
- Base every statement on the provided sources; say so when the sources are silent.
- Cite the sources you rely on with their reference markers, e.g. [Source 2].
- End with a "Sources" section listing each reference marker and its title.\
"""

SYSTEM_PROMPT_NO_REFERENCES = """\
You are an analysis assistant. You receive several source documents and an \
analysis instruction, and you produce a single well-structured analysis.

Rules:
- Write the whole answer in {language}.
- Format the answer as {output_format}.
- Base every statement on the provided sources.\
"""

DEFAULT_INSTRUCTIONS: dict[AnalysisType, str] = {
    AnalysisType.SYNTHESIS: (
        "Integrate all sources into one synthesis: identify the key themes, "
        "merge overlapping points and summarize the combined picture."
    ),
    AnalysisType.COMPARISON: (
        "Compare the sources: lay out where they agree, where they differ, "
        "and which claims appear in only one of them."
    ),
    AnalysisType.SUMMARY: (
        "Summarize each source on its own first, then close with a short "
        "overall summary that ties them together."
    ),
}


def instruction_for(request: AnalysisRequest) -> str:
    """The instruction to send: the custom prompt, or the type's default.

    An empty custom prompt never goes out verbatim. A custom analysis
    without a prompt falls back to the synthesis instruction.
    """
    if request.custom_prompt:
        return request.custom_prompt
    return DEFAULT_INSTRUCTIONS.get(
        request.analysis_type, DEFAULT_INSTRUCTIONS[AnalysisType.SYNTHESIS]
    )


def render_system_prompt(request: AnalysisRequest) -> str:
    template = (
        SYSTEM_PROMPT if request.include_source_references else SYSTEM_PROMPT_NO_REFERENCES
    )
    return template.format(
        language=request.language,
        output_format=request.output_format.value,
    )


def render_source(index: int, source: SourceRecord) -> str:
    """Render one source under its ``[Source N]`` reference marker."""
    lines = [f"[Source {index}] {source.title} ({source.type.label})"]
    metadata = source.metadata
    if isinstance(metadata, WebClipMetadata):
        lines.append(f"URL: {metadata.url}")
        if metadata.site_name:
            lines.append(f"Site: {metadata.site_name}")
        if metadata.author:
            lines.append(f"Author: {metadata.author}")
        if metadata.published_date:
            lines.append(f"Published: {metadata.published_date}")
    elif isinstance(metadata, NoteMetadata):
        lines.append(f"Path: {metadata.file_path}")
        if metadata.tags:
            lines.append(f"Tags: {', '.join(sorted(metadata.tags))}")
    lines.append("")
    lines.append(source.content)
    return "\n".join(lines)


def render_user_message(request: AnalysisRequest) -> str:
    """Build the user message from the instruction and all sources, in order."""
    parts = [
        f"Analysis type: {request.analysis_type.value}",
        f"Instruction: {instruction_for(request)}",
        "",
        f"--- Sources ({len(request.sources)}) ---",
    ]
    for i, source in enumerate(request.sources, 1):
        parts.append("")
        parts.append(render_source(i, source))
    return "\n".join(parts)
