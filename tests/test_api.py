"""Summary: API integration tests.

Importance: Validates FastAPI endpoints against the console workflows.
Alternatives: Use manual curl testing only.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient

from contactdesk.api import create_app
from contactdesk.app import build_console
from contactdesk.audio import RecordingAudioPlayer
from contactdesk.config import AppConfig
from contactdesk.document_store import InMemoryDocumentStore
from contactdesk.identity import MockIdentityProvider
from contactdesk.models import OperatorAccount


def _build_config(api_key: str = "") -> AppConfig:
    """Summary: Build an AppConfig for API tests.

    Importance: Ensures tests use in-memory providers.
    Alternatives: Load AppConfig from environment variables.
    """

    return AppConfig(
        identity_provider="mock",
        document_store="memory",
        firebase_api_key="",
        firebase_project_id="",
        identity_base_url="https://identitytoolkit.googleapis.com/v1",
        firestore_base_url="https://firestore.googleapis.com/v1",
        collection_name="messages",
        order_by_field="timestamp",
        narrow_width_threshold=768,
        chime_resource="sounds/notification.mp3",
        mock_users_path="data/mock_users.json",
        mock_messages_path="data/mock_messages.json",
        api_host="127.0.0.1",
        api_port=8000,
        api_key=api_key,
    )


def _client(store: InMemoryDocumentStore, api_key: str = "") -> TestClient:
    config = _build_config(api_key)
    audio = RecordingAudioPlayer()
    identity = MockIdentityProvider([OperatorAccount(email="a@b.com", password="pw")])
    console = build_console(config, identity=identity, store=store, audio=audio)
    return TestClient(create_app(config, console=console, audio=audio))


def _store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.add_document(
        "messages",
        {"name": "Ann", "service": "Visa", "timestamp": datetime(2026, 1, 1, 9, tzinfo=timezone.utc)},
        doc_id="1",
    )
    return store


def test_health() -> None:
    response = _client(InMemoryDocumentStore()).get("/health")
    assert response.json() == {"status": "ok"}


def test_view_is_locked_before_login() -> None:
    """Summary: Verify no message data is served before login.

    Importance: The login gate protects inquiries from anonymous visitors.
    Alternatives: Filter message fields instead of hiding the list.
    """

    response = _client(_store()).get("/view")
    assert response.status_code == 200
    payload = response.json()
    assert payload["session_state"] == "unauthenticated"
    assert payload["items"] == []


def test_login_select_and_logout() -> None:
    store = _store()
    client = _client(store)
    response = client.post("/session/login", json={"email": "a@b.com", "password": "pw"})
    assert response.status_code == 200
    assert response.json()["items"][0]["is_new"] is True

    selected = client.post("/messages/1/select").json()
    assert selected["detail"]["service"] == "Visa"
    assert selected["items"][0]["is_new"] is False

    logged_out = client.post("/session/logout").json()
    assert logged_out["session_state"] == "unauthenticated"
    assert logged_out["detail"] is None


def test_invalid_login_returns_401() -> None:
    client = _client(_store())
    response = client.post("/session/login", json={"email": "a@b.com", "password": "bad"})
    assert response.status_code == 401
    assert client.get("/view").json()["login_error"] == "Invalid email or password"


def test_password_reset_failure_returns_400() -> None:
    client = _client(_store())
    assert client.post("/session/password-reset", json={"email": "a@b.com"}).status_code == 200
    assert client.post("/session/password-reset", json={"email": "bad"}).status_code == 400


def test_select_requires_session() -> None:
    response = _client(_store()).post("/messages/1/select")
    assert response.status_code == 401


def test_resize_and_back_switch_panes() -> None:
    client = _client(_store())
    client.post("/session/login", json={"email": "a@b.com", "password": "pw"})
    narrow = client.post("/view/resize", json={"width": 500}).json()
    assert narrow["layout"] == "narrow"
    detail = client.post("/messages/1/select").json()
    assert (detail["show_list"], detail["show_detail"]) == (False, True)
    listing = client.post("/view/back").json()
    assert (listing["show_list"], listing["show_detail"]) == (True, False)


def test_chimes_are_drained_once() -> None:
    store = _store()
    client = _client(store)
    client.post("/session/login", json={"email": "a@b.com", "password": "pw"})
    store.add_document(
        "messages",
        {"name": "Bob", "timestamp": datetime(2026, 1, 2, 9, tzinfo=timezone.utc)},
        doc_id="2",
    )
    assert client.get("/chimes").json() == {"chimes": ["sounds/notification.mp3"]}
    assert client.get("/chimes").json() == {"chimes": []}


def test_api_key_is_enforced_when_configured() -> None:
    client = _client(_store(), api_key="secret")
    assert client.get("/view").status_code == 401
    assert client.get("/view", headers={"X-API-Key": "secret"}).status_code == 200


def test_shutdown_closes_console() -> None:
    """Summary: Verify application shutdown stops the message stream.

    Importance: Listeners must not outlive the server process lifecycle.
    Alternatives: Rely on process exit to drop subscriptions.
    """

    store = _store()
    config = _build_config()
    audio = RecordingAudioPlayer()
    identity = MockIdentityProvider([OperatorAccount(email="a@b.com", password="pw")])
    console = build_console(config, identity=identity, store=store, audio=audio)
    with TestClient(create_app(config, console=console, audio=audio)) as client:
        client.post("/session/login", json={"email": "a@b.com", "password": "pw"})
        assert len(console.messages) == 1
    store.add_document(
        "messages",
        {"name": "Bob", "timestamp": datetime(2026, 1, 2, 9, tzinfo=timezone.utc)},
        doc_id="2",
    )
    assert console.messages == ()
    assert audio.played == []
