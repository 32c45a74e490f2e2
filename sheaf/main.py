"""Sheaf — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sheaf.backends.registry import ProviderRegistry
from sheaf.config import settings
from sheaf.errors import (
    BackendError,
    EmptySourceSet,
    IndexOutOfRange,
    ProviderNotConfigured,
    SessionClosed,
    SheafError,
    SourceNotFound,
    SourceUnavailable,
    ValidationError,
)
from sheaf.models.source import ClipData
from sheaf.orchestrator.session import AnalysisSession
from sheaf.orchestrator.session_store import SessionStore
from sheaf.sources.clipper import WebClipper
from sheaf.sources.notes import VaultNoteReader

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[SheafError], int] = {
    BackendError: 502,
    EmptySourceSet: 422,
    ValidationError: 422,
    SourceUnavailable: 404,
    SourceNotFound: 404,
    ProviderNotConfigured: 409,
    SessionClosed: 409,
    IndexOutOfRange: 400,
}

registry = ProviderRegistry()
note_reader = VaultNoteReader()
clipper = WebClipper()

# Open sessions keyed by session id; idle ones expire, the oldest is evicted at the cap
sessions = SessionStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    yield
    sessions.close_all()


app = FastAPI(
    title="Sheaf",
    description="Multi-source aggregation and analysis",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "app://obsidian.md"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Dependencies ---


def get_registry() -> ProviderRegistry:
    return registry


def get_note_reader() -> VaultNoteReader:
    return note_reader


def get_clipper() -> WebClipper:
    return clipper


def get_session(session_id: str) -> AnalysisSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# --- Error handling ---


@app.exception_handler(SheafError)
async def sheaf_error_handler(request: Request, exc: SheafError) -> JSONResponse:
    status = 400
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            status = ERROR_STATUS[error_type]
            break
    body = {"error": exc.kind, "detail": str(exc)}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    return JSONResponse(status_code=status, content=body)


@app.exception_handler(httpx.HTTPError)
async def backend_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    logger.error("Backend call failed: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"error": "backend_error", "detail": "Analysis backend request failed"},
    )


# --- Request / Response models ---


class ClipRequest(BaseModel):
    content: str
    url: str
    title: str | None = None
    site_name: str | None = None
    author: str | None = None
    date: str | None = None

    def to_clip(self) -> ClipData:
        return ClipData(**self.model_dump())


class CreateSessionRequest(BaseModel):
    provider: str | None = None
    initial_clip: ClipRequest | None = None


class UrlClipRequest(BaseModel):
    url: str


class NoteRequest(BaseModel):
    identifier: str


class TextRequest(BaseModel):
    title: str
    content: str


class OptionsRequest(BaseModel):
    analysis_type: str | None = None
    custom_prompt: str | None = None
    provider: str | None = None
    output_format: str | None = None
    language: str | None = None


# --- Routes ---


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/providers")
async def list_providers(registry: ProviderRegistry = Depends(get_registry)):
    return {"providers": registry.describe()}


@app.get("/api/notes")
async def search_notes(query: str = "", reader: VaultNoteReader = Depends(get_note_reader)):
    """Search the vault for notes to add, by path substring."""
    return {"notes": await reader.list_notes(query)}


@app.post("/api/sessions", status_code=201)
async def create_session(
    req: CreateSessionRequest | None = None,
    registry: ProviderRegistry = Depends(get_registry),
    reader: VaultNoteReader = Depends(get_note_reader),
):
    req = req or CreateSessionRequest()
    session = AnalysisSession(
        registry=registry,
        note_reader=reader,
        initial_clip=req.initial_clip.to_clip() if req.initial_clip else None,
        provider=req.provider,
    )
    sessions.add(session)
    logger.info("Opened session %s", session.id)
    return session.to_dict()


@app.get("/api/sessions/{session_id}")
async def get_session_state(session: AnalysisSession = Depends(get_session)):
    return session.to_dict()


@app.post("/api/sessions/{session_id}/sources/web-clip", status_code=201)
async def add_web_clip(req: ClipRequest, session: AnalysisSession = Depends(get_session)):
    record = session.add_web_clip(req.to_clip())
    return {"source": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.post("/api/sessions/{session_id}/sources/url", status_code=201)
async def add_url(
    req: UrlClipRequest,
    session: AnalysisSession = Depends(get_session),
    clipper: WebClipper = Depends(get_clipper),
):
    """Fetch a page and admit it as a web clip."""
    clip = await clipper.clip(req.url)
    record = session.add_web_clip(clip)
    return {"source": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.post("/api/sessions/{session_id}/sources/note", status_code=201)
async def add_note(req: NoteRequest, session: AnalysisSession = Depends(get_session)):
    record = await session.add_note(req.identifier)
    return {"source": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.post("/api/sessions/{session_id}/sources/manual", status_code=201)
async def add_manual_input(req: TextRequest, session: AnalysisSession = Depends(get_session)):
    record = session.add_manual_input(req.title, req.content)
    return {"source": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.post("/api/sessions/{session_id}/sources/selection", status_code=201)
async def add_selection(req: TextRequest, session: AnalysisSession = Depends(get_session)):
    record = session.add_selection(req.title, req.content)
    return {"source": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.delete("/api/sessions/{session_id}/sources/at/{index}")
async def remove_source_at(index: int, session: AnalysisSession = Depends(get_session)):
    record = session.remove_at(index)
    return {"removed": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.delete("/api/sessions/{session_id}/sources/{source_id}")
async def remove_source(source_id: str, session: AnalysisSession = Depends(get_session)):
    record = session.remove(source_id)
    return {"removed": record.to_dict(), "stats": session.current_stats().to_dict()}


@app.get("/api/sessions/{session_id}/stats")
async def get_stats(session: AnalysisSession = Depends(get_session)):
    return session.current_stats().to_dict()


@app.patch("/api/sessions/{session_id}/options")
async def update_options(req: OptionsRequest, session: AnalysisSession = Depends(get_session)):
    session.set_options(req.model_dump(exclude_unset=True))
    return session.options.to_dict()


@app.post("/api/sessions/{session_id}/submit")
async def submit_session(session: AnalysisSession = Depends(get_session)):
    """Validate the session, run the analysis and close the session."""
    result = await session.submit()
    sessions.pop(session.id)
    return result.to_dict()


@app.delete("/api/sessions/{session_id}")
async def cancel_session(session: AnalysisSession = Depends(get_session)):
    session.cancel()
    sessions.pop(session.id)
    return {"id": session.id, "state": session.state.value}
