"""Shared test fixtures — fake backends, registry and note reader."""

import os

# No real LLM calls from tests, whatever the shell environment holds.
os.environ["SHEAF_ANTHROPIC_API_KEY"] = "for-tests-only"
os.environ["SHEAF_XAI_API_KEY"] = ""
os.environ["SHEAF_GOOGLE_API_KEY"] = ""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from sheaf.errors import ProviderNotConfigured
from sheaf.models.analysis import AnalysisRequest, AnalysisResult
from sheaf.models.source import ClipData
from sheaf.orchestrator.session import AnalysisSession
from sheaf.sources.notes import NoteContent, NoteNotFound


class FakeBackend:
    """Records requests and answers with a canned markdown result."""

    def __init__(self, provider_id: str = "claude", fail: Exception | None = None) -> None:
        self.name = f"Fake {provider_id}"
        self.provider_id = provider_id
        self.fail = fail
        self.requests: list[AnalysisRequest] = []

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        self.requests.append(request)
        if self.fail is not None:
            raise self.fail
        return AnalysisResult(
            provider=self.provider_id,
            content=f"# Analysis\n\n{len(request.sources)} sources analyzed [Source 1]",
            model="fake-model",
            source_ids=[s.id for s in request.sources],
        )


class FakeRegistry:
    """Registry where only the listed providers are configured."""

    def __init__(self, configured: tuple[str, ...] = ("claude",)) -> None:
        self.configured = set(configured)
        self.backends: dict[str, FakeBackend] = {}

    def is_configured(self, provider_id: str) -> bool:
        return provider_id in self.configured

    def get(self, provider_id: str) -> FakeBackend:
        if provider_id not in self.configured:
            raise ProviderNotConfigured(provider_id, self.display_name(provider_id))
        return self.backends.setdefault(provider_id, FakeBackend(provider_id))

    def display_name(self, provider_id: str) -> str:
        return provider_id.title()

    def describe(self) -> list[dict]:
        return [
            {"id": p, "display_name": self.display_name(p), "configured": True}
            for p in sorted(self.configured)
        ]


class FakeNoteReader:
    """In-memory notes keyed by identifier."""

    def __init__(self, notes: dict[str, NoteContent] | None = None) -> None:
        self.notes = notes or {}
        self.reads: list[str] = []

    async def read_note(self, identifier: str) -> NoteContent:
        self.reads.append(identifier)
        if identifier not in self.notes:
            raise NoteNotFound(identifier)
        return self.notes[identifier]

    async def list_notes(self, query: str = "", limit: int = 50) -> list[str]:
        return [n for n in sorted(self.notes) if query.lower() in n.lower()][:limit]


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def note_reader() -> FakeNoteReader:
    return FakeNoteReader(
        {
            "Projects/Roadmap.md": NoteContent(
                content="Ship the beta in May.\nThen gather feedback.",
                path="Projects/Roadmap.md",
                tags=frozenset({"#planning", "#beta"}),
            ),
            "Daily/2026-10-01.md": NoteContent(
                content="Met with the design team.",
                path="Daily/2026-10-01.md",
            ),
        }
    )


@pytest.fixture
def session(registry: FakeRegistry, note_reader: FakeNoteReader) -> AnalysisSession:
    return AnalysisSession(
        registry=registry,
        note_reader=note_reader,
        provider="claude",
        default_language="English",
    )


@pytest.fixture
def clip() -> ClipData:
    return ClipData(
        title="Attention Is All You Need",
        content="The dominant sequence transduction models are based on recurrent networks.",
        url="https://example.com/papers/attention",
        site_name="Example Papers",
        author="Vaswani et al.",
        date="2017-06-12",
    )


@pytest.fixture
def client(registry: FakeRegistry, note_reader: FakeNoteReader) -> Iterator[TestClient]:
    from sheaf.main import app, get_note_reader, get_registry, sessions

    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_note_reader] = lambda: note_reader
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    sessions.clear()
