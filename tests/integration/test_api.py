"""Integration tests for the REST and WebSocket API."""

import pytest
from fastapi.testclient import TestClient

from page_narrator.application.api import build_controller, create_app
from page_narrator.application.config import Settings
from page_narrator.application.controller import SessionController
from page_narrator.domain.errors import DocumentLoadError
from page_narrator.infrastructure.dynamodb_progress_repository import DynamoDBProgressRepository
from page_narrator.infrastructure.local_progress_repository import LocalProgressRepository
from page_narrator.infrastructure.pdf_page_provider import PdfPageProvider
from page_narrator.infrastructure.pyttsx3_synthesizer import Pyttsx3Synthesizer


@pytest.fixture
def controller(reading_service, progress_repository):
    return SessionController(
        reading_service=reading_service,
        progress_repository=progress_repository,
        default_language_code="pt-BR",
    )


@pytest.fixture
def client(controller):
    with TestClient(create_app(controller=controller)) as test_client:
        yield test_client


def open_document(client, **extra):
    response = client.post("/session/open", json={"source": "/books/doc.pdf", "title": "Doc", **extra})
    assert response.status_code == 200
    return response.json()


def receive_until(websocket, message_type, limit=20):
    """Read WebSocket messages until one of the given type arrives."""
    for _ in range(limit):
        data = websocket.receive_json()
        if data["type"] == message_type:
            return data
    raise AssertionError(f"No {message_type} message received")


class TestRestApi:
    """REST endpoint tests."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_session_starts_idle(self, client):
        response = client.get("/session")

        assert response.status_code == 200
        assert response.json()["state"] == "idle"

    def test_open_and_navigate(self, client):
        snapshot = open_document(client)
        assert snapshot["state"] == "ready"
        assert snapshot["current_page"] == 1
        assert snapshot["total_pages"] == 3
        assert snapshot["title"] == "Doc"

        assert client.post("/session/next").json()["current_page"] == 2
        assert client.post("/session/next").json()["current_page"] == 3
        assert client.post("/session/next").json()["current_page"] == 3
        assert client.post("/session/previous").json()["current_page"] == 2
        assert client.post("/session/pages/1").json()["current_page"] == 1
        assert client.post("/session/pages/42").json()["current_page"] == 1

    def test_open_requires_source(self, client):
        response = client.post("/session/open", json={"source": ""})

        assert response.status_code == 422

    def test_open_failure_is_reported_in_snapshot(self, client, page_provider):
        page_provider.load_error = DocumentLoadError("Could not parse PDF")

        snapshot = open_document(client)

        assert snapshot["state"] == "error"
        assert "Could not parse PDF" in snapshot["error_message"]

    def test_toggle_reading_and_mute(self, client, fake_local):
        fake_local.delay = 5
        open_document(client)

        snapshot = client.post("/session/reading/toggle").json()
        assert snapshot["state"] == "reading"
        assert snapshot["is_reading"] is True

        snapshot = client.post("/session/mute/toggle").json()
        assert snapshot["is_muted"] is True
        assert snapshot["state"] == "reading"

        snapshot = client.post("/session/reading/toggle").json()
        assert snapshot["state"] == "ready"
        assert snapshot["is_reading"] is False

    def test_page_image(self, client):
        assert client.get("/session/page.png").status_code == 404

        open_document(client)
        response = client.get("/session/page.png")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == b"png-1"

    def test_progress(self, client):
        snapshot = open_document(client)
        client.post("/session/pages/3")

        response = client.get(f"/progress/{snapshot['document_id']}")
        assert response.status_code == 200
        assert response.json()["progress"] == 100
        assert response.json()["last_page"] == 3

        listing = client.get("/progress").json()
        assert [p["document_id"] for p in listing] == [snapshot["document_id"]]

        assert client.get("/progress/unknown").status_code == 404

    def test_close(self, client, page_provider):
        snapshot = open_document(client)

        response = client.post("/session/close")

        assert response.json()["state"] == "idle"
        assert page_provider.released == [snapshot["document_id"]]


class TestWebSocket:
    """WebSocket endpoint tests."""

    def test_initial_state_is_sent(self, client):
        with client.websocket_connect("/ws") as websocket:
            data = websocket.receive_json()

        assert data["type"] == "session.state"
        assert data["session"]["state"] == "idle"

    def test_control_messages_drive_the_session(self, client, controller):
        open_document(client)

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "page.next"})
            change = receive_until(websocket, "page.change")
            assert change["page"] == 2
            assert change["direction"] == "next"

            websocket.send_json({"type": "page.goto", "page": 3})
            assert receive_until(websocket, "page.change")["page"] == 3

            websocket.send_json({"type": "mute.toggle"})
            state = receive_until(websocket, "session.state")
            while not state["session"]["is_muted"]:
                state = receive_until(websocket, "session.state")

            websocket.send_json({"type": "session.close"})
            state = receive_until(websocket, "session.state")
            while state["session"]["state"] != "idle":
                state = receive_until(websocket, "session.state")

        assert controller.snapshot().is_muted is True

    def test_invalid_messages_get_errors(self, client):
        open_document(client)

        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("not json")
            error = receive_until(websocket, "error")
            assert error["code"] == "INVALID_MESSAGE"

            websocket.send_json({"type": "page.teleport"})
            assert receive_until(websocket, "error")["code"] == "INVALID_MESSAGE"

            websocket.send_json({"type": "page.goto", "page": 99})
            assert receive_until(websocket, "error")["code"] == "INVALID_PAGE"


class TestBuildController:
    """Wiring from settings."""

    def test_local_only_wiring(self):
        settings = Settings(_env_file=None, remote_synthesis_enabled=False, progress_backend="local")

        controller = build_controller(settings)

        gateway = controller.reading_service.gateway
        assert isinstance(gateway.local, Pyttsx3Synthesizer)
        assert gateway.remote is None
        assert gateway.sink is None
        assert isinstance(controller.reading_service.page_provider, PdfPageProvider)
        assert isinstance(controller.progress_repository, LocalProgressRepository)
        assert controller.default_language_code == settings.default_language_code

    def test_dynamodb_progress_backend(self):
        settings = Settings(
            _env_file=None,
            remote_synthesis_enabled=False,
            progress_backend="dynamodb",
            progress_table_name="progress-table",
        )

        controller = build_controller(settings)

        repository = controller.progress_repository
        assert isinstance(repository, DynamoDBProgressRepository)
        assert repository.table_name == "progress-table"
        assert controller.reading_service.progress_repository is repository
