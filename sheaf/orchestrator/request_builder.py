"""Request builder — validates a collection and options into an AnalysisRequest."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sheaf.errors import EmptySourceSet, ProviderNotConfigured
from sheaf.models.analysis import AnalysisOptions, AnalysisRequest, OutputFormat
from sheaf.models.source import SourceRecord

logger = logging.getLogger(__name__)


def build_request(
    records: Sequence[SourceRecord],
    options: AnalysisOptions,
    is_configured: Callable[[str], bool],
    default_language: str,
) -> AnalysisRequest:
    """Validate, then snapshot ``records`` and ``options`` into a request.

    Checks run in order and stop at the first failure: an empty collection
    raises EmptySourceSet, an unconfigured provider raises
    ProviderNotConfigured. Neither argument is mutated.
    """
    if len(records) == 0:
        raise EmptySourceSet()
    if not is_configured(options.provider):
        raise ProviderNotConfigured(options.provider)

    request = AnalysisRequest(
        sources=tuple(records),
        analysis_type=options.analysis_type,
        custom_prompt=options.custom_prompt.strip(),
        output_format=OutputFormat.MARKDOWN,
        include_source_references=True,
        language=options.language or default_language,
        provider=options.provider,
    )
    logger.debug(
        "Built %s request with %d sources for %s",
        request.analysis_type.value, len(request.sources), request.provider,
    )
    return request
