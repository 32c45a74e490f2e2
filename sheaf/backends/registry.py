"""Provider registry — which analysis backends exist and which are configured."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sheaf.backends.base import AnalysisBackend
from sheaf.backends.claude import ClaudeBackend
from sheaf.backends.gemini import GeminiBackend
from sheaf.backends.grok import GrokBackend
from sheaf.config import Settings, settings
from sheaf.errors import ProviderNotConfigured

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    id: str
    display_name: str
    key_setting: str
    factory: Callable[[str], AnalysisBackend]


PROVIDERS: tuple[ProviderSpec, ...] = (
    ProviderSpec("claude", "Claude (Anthropic)", "anthropic_api_key",
                 lambda key: ClaudeBackend(api_key=key)),
    ProviderSpec("grok", "Grok (xAI)", "xai_api_key",
                 lambda key: GrokBackend(api_key=key)),
    ProviderSpec("gemini", "Gemini (Google)", "google_api_key",
                 lambda key: GeminiBackend(api_key=key)),
)


class ProviderRegistry:
    """Looks up providers by id and builds backends from configured API keys."""

    def __init__(
        self,
        config: Settings | None = None,
        providers: tuple[ProviderSpec, ...] = PROVIDERS,
    ) -> None:
        self.config = config or settings
        self._providers = {p.id: p for p in providers}

    def _api_key(self, provider_id: str) -> str:
        spec = self._providers.get(provider_id)
        if spec is None:
            return ""
        return (getattr(self.config, spec.key_setting, "") or "").strip()

    def is_configured(self, provider_id: str) -> bool:
        return bool(self._api_key(provider_id))

    def get(self, provider_id: str) -> AnalysisBackend:
        """Instantiate the backend for ``provider_id``."""
        key = self._api_key(provider_id)
        if not key:
            logger.warning("Provider %s requested but not configured", provider_id)
            raise ProviderNotConfigured(provider_id, self.display_name(provider_id))
        return self._providers[provider_id].factory(key)

    def display_name(self, provider_id: str) -> str:
        spec = self._providers.get(provider_id)
        return spec.display_name if spec else provider_id

    def describe(self) -> list[dict]:
        return [
            {
                "id": spec.id,
                "display_name": spec.display_name,
                "configured": self.is_configured(spec.id),
            }
            for spec in self._providers.values()
        ]
