import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_controller, get_display
from paced_reader.presentation import (
    GlossaryDefinitionProvider,
    ManualTimers,
    PresentationController,
    ReaderConfig,
    RecordingDisplay,
)

FIVE_CHUNKS = "One two. Three four. Five six. Seven eight. Nine ten."


@pytest.fixture
def client():
    display = RecordingDisplay()
    controller = PresentationController(
        config=ReaderConfig(chunking="sentences", target_words=2, auto_start=False),
        display=display,
        timers=ManualTimers(),
        provider=GlossaryDefinitionProvider({}),
    )
    app = create_app()
    app.dependency_overrides[get_controller] = lambda: controller
    app.dependency_overrides[get_display] = lambda: display
    with TestClient(app) as test_client:
        yield test_client


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_session_starts_idle(client):
    body = client.get("/session").json()
    assert body["mode"] == "idle"
    assert body["chunk_count"] == 0


def test_load_text_and_navigate(client):
    body = client.post("/session/text", json={"text": FIVE_CHUNKS}).json()
    assert body["mode"] == "presenting"
    assert body["chunk_count"] == 5

    body = client.post("/session/transcripts", json={"text": "next"}).json()
    assert body["intent"] == "next"
    assert body["index"] == 1

    body = client.post("/session/transcripts", json={"text": "nex", "is_final": False}).json()
    assert body["intent"] == "none"
    assert body["index"] == 1

    chunk = client.get("/session/chunks/1").json()
    assert chunk["content"] == "[2/5]\n\nThree four."
    assert client.get("/session/chunks/7").status_code == 404

    history = client.get("/session/display", params={"limit": 1}).json()
    assert history == [{"content": "[2/5]\n\nThree four.", "duration_ms": 5000}]


def test_lookup_state_is_reported(client):
    client.post("/session/text", json={"text": FIVE_CHUNKS})
    body = client.post("/session/transcripts", json={"text": "hey reader"}).json()
    assert body["mode"] == "lookup"
    assert body["lookup"] == {"query": None, "status": None}


def test_empty_text_rejected(client):
    assert client.post("/session/text", json={"text": "  "}).status_code == 400


def test_upload_text_document(client):
    files = {"file": ("book.txt", FIVE_CHUNKS.encode("utf-8"), "text/plain")}
    body = client.post("/session/document", files=files).json()
    assert body["chunk_count"] == 5


def test_upload_rejects_unsupported_or_empty_files(client):
    files = {"file": ("book.docx", b"data", "application/octet-stream")}
    assert client.post("/session/document", files=files).status_code == 400
    files = {"file": ("book.txt", b"", "text/plain")}
    assert client.post("/session/document", files=files).status_code == 400


def test_upload_unreadable_pdf_is_unprocessable(client):
    files = {"file": ("book.pdf", b"not a pdf", "application/pdf")}
    assert client.post("/session/document", files=files).status_code == 422


def test_shutdown_stops_the_reading_session():
    controller = PresentationController(
        config=ReaderConfig(chunking="sentences", target_words=2, auto_start=False),
        display=RecordingDisplay(),
        timers=ManualTimers(),
        provider=GlossaryDefinitionProvider({}),
    )
    app = create_app()
    app.dependency_overrides[get_controller] = lambda: controller
    with TestClient(app) as test_client:
        test_client.post("/session/text", json={"text": FIVE_CHUNKS})
        test_client.post("/session/transcripts", json={"text": "auto"})
        assert controller.scheduler.active

    assert not controller.scheduler.active
    assert not controller.state.auto_advancing
