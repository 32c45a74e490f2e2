"""Tests for the FastAPI surface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from sheaf.errors import BackendError

from conftest import FakeBackend, FakeRegistry


def _open(client: TestClient, **body) -> str:
    response = client.post("/api/sessions", json=body)
    assert response.status_code == 201
    return response.json()["id"]


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_providers(client: TestClient) -> None:
    providers = client.get("/api/providers").json()["providers"]
    assert providers == [{"id": "claude", "display_name": "Claude", "configured": True}]


def test_note_search(client: TestClient) -> None:
    notes = client.get("/api/notes", params={"query": "road"}).json()["notes"]
    assert notes == ["Projects/Roadmap.md"]


class TestSessions:
    def test_create_with_initial_clip(self, client: TestClient) -> None:
        response = client.post(
            "/api/sessions",
            json={"initial_clip": {"content": "x" * 400, "url": "https://example.com"}},
        )
        data = response.json()
        assert data["state"] == "populating"
        assert data["stats"]["estimated_tokens"] == 100
        assert data["sources"][0]["title"] == "web clipping"

    def test_unknown_session(self, client: TestClient) -> None:
        assert client.get("/api/sessions/nope").status_code == 404

    def test_add_manual_and_stats(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.post(
            f"/api/sessions/{sid}/sources/manual",
            json={"title": "Notes", "content": "hello world"},
        )
        assert response.status_code == 201
        assert response.json()["stats"] == {
            "total_sources": 1,
            "total_chars": 11,
            "total_words": 2,
            "estimated_tokens": 3,
        }

    def test_missing_title_is_422(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.post(
            f"/api/sessions/{sid}/sources/manual", json={"title": "", "content": "text"}
        )
        assert response.status_code == 422
        assert response.json()["field"] == "title"
        assert client.get(f"/api/sessions/{sid}/stats").json()["total_sources"] == 0

    def test_add_note(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.post(
            f"/api/sessions/{sid}/sources/note", json={"identifier": "Projects/Roadmap.md"}
        )
        assert response.status_code == 201
        assert response.json()["source"]["metadata"]["tags"] == ["#beta", "#planning"]

    def test_missing_note_is_404(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.post(
            f"/api/sessions/{sid}/sources/note", json={"identifier": "Nope.md"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "source_unavailable"

    def test_remove_by_index_and_id(self, client: TestClient) -> None:
        sid = _open(client)
        first = client.post(
            f"/api/sessions/{sid}/sources/selection", json={"title": "A", "content": "a"}
        ).json()["source"]
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "B", "content": "b"})
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "C", "content": "c"})

        assert client.delete(f"/api/sessions/{sid}/sources/at/1").json()["removed"]["title"] == "B"
        assert client.delete(f"/api/sessions/{sid}/sources/{first['id']}").status_code == 200
        titles = [s["title"] for s in client.get(f"/api/sessions/{sid}").json()["sources"]]
        assert titles == ["C"]

    def test_stale_index_is_400(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.delete(f"/api/sessions/{sid}/sources/at/3")
        assert response.status_code == 400
        assert response.json()["error"] == "index_out_of_range"

    def test_unknown_source_id_is_404(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.delete(f"/api/sessions/{sid}/sources/source-1-abc")
        assert response.status_code == 404

    def test_update_options(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.patch(
            f"/api/sessions/{sid}/options",
            json={"analysis_type": "summary", "custom_prompt": " focus on risks "},
        )
        assert response.json()["analysis_type"] == "summary"
        bad = client.patch(f"/api/sessions/{sid}/options", json={"analysis_type": "poem"})
        assert bad.status_code == 422

    def test_rejected_options_patch_changes_nothing(self, client: TestClient) -> None:
        sid = _open(client)
        client.patch(f"/api/sessions/{sid}/options", json={"custom_prompt": "keep this"})
        bad = client.patch(
            f"/api/sessions/{sid}/options",
            json={"custom_prompt": "replace it", "analysis_type": "poem"},
        )
        assert bad.status_code == 422
        assert bad.json()["error"] == "validation_error"
        options = client.get(f"/api/sessions/{sid}").json()["options"]
        assert options["custom_prompt"] == "keep this"
        assert options["analysis_type"] == "synthesis"

    def test_cancel(self, client: TestClient) -> None:
        sid = _open(client)
        assert client.delete(f"/api/sessions/{sid}").json()["state"] == "cancelled"
        assert client.get(f"/api/sessions/{sid}").status_code == 404


class TestSubmit:
    def test_empty_session_is_422(self, client: TestClient) -> None:
        sid = _open(client)
        response = client.post(f"/api/sessions/{sid}/submit")
        assert response.status_code == 422
        assert response.json()["error"] == "empty_source_set"

    def test_unconfigured_provider_is_409(self, client: TestClient) -> None:
        sid = _open(client, provider="gemini")
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "A", "content": "a"})
        response = client.post(f"/api/sessions/{sid}/submit")
        assert response.status_code == 409
        assert "gemini" in response.json()["detail"]
        # The session stays open so another provider can be chosen
        assert client.get(f"/api/sessions/{sid}").json()["state"] == "populating"

    def test_submit(self, client: TestClient, registry: FakeRegistry) -> None:
        sid = _open(client)
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "A", "content": "a"})
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "B", "content": "b"})
        client.patch(f"/api/sessions/{sid}/options", json={"custom_prompt": "  compare  "})

        response = client.post(f"/api/sessions/{sid}/submit")

        assert response.status_code == 200
        assert response.json()["content"].startswith("# Analysis")
        sent = registry.backends["claude"].requests[0]
        assert len(sent.sources) == 2
        assert sent.custom_prompt == "compare"
        assert client.get(f"/api/sessions/{sid}").status_code == 404

    def test_backend_failure_is_502(self, client: TestClient, registry: FakeRegistry) -> None:
        import httpx

        registry.backends["claude"] = FakeBackend("claude", fail=httpx.ReadTimeout("slow"))
        sid = _open(client)
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "A", "content": "a"})
        response = client.post(f"/api/sessions/{sid}/submit")
        assert response.status_code == 502
        assert client.get(f"/api/sessions/{sid}").json()["state"] == "populating"

    def test_unreadable_backend_answer_is_502(
        self, client: TestClient, registry: FakeRegistry
    ) -> None:
        registry.backends["claude"] = FakeBackend(
            "claude", fail=BackendError("claude", "missing content")
        )
        sid = _open(client)
        client.post(f"/api/sessions/{sid}/sources/manual", json={"title": "A", "content": "a"})
        response = client.post(f"/api/sessions/{sid}/submit")
        assert response.status_code == 502
        assert response.json()["error"] == "backend_error"
        assert client.get(f"/api/sessions/{sid}").json()["state"] == "populating"
