import os
import tempfile
import uuid

# Must be set before anything imports chatrelay.config.settings
os.environ["APP_ENV"] = "testing"
os.environ["CHAT_STORE_BACKEND"] = "memory"
os.environ["SESSION_TOKEN_SECRET"] = "test-secret"
os.environ["PASSWORD_HASH_METHOD"] = "pbkdf2:sha256:1000"
os.environ["REDIS_URL"] = ""
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["WS_CLOSE_ON_AUTH_FAILURE"] = "false"
os.environ["BLOB_STORAGE_DIR"] = tempfile.mkdtemp(prefix="chatrelay-blobs-")

import pytest
from fastapi.testclient import TestClient

from chatrelay.application.realtime import (
    ConnectionLifecycleController,
    ConnectionSession,
    MessageBroadcastEngine,
    PresenceRegistry,
)
from chatrelay.domain.entities.identity import Identity
from chatrelay.domain.value_objects.user_id import UserId
from chatrelay.fastapi_app import create_fastapi_app
from chatrelay.infrastructure.persistence import (
    InMemoryCredentialStore,
    InMemoryMessageLog,
)
from chatrelay.services.session_token_codec import SessionTokenCodec
from chatrelay.setup.ioc.container import create_container

TEST_SECRET = "test-secret"


def make_identity(username="alice", display_name=None) -> Identity:
    return Identity(
        id=UserId(str(uuid.uuid4())),
        username=username,
        display_name=display_name or username.capitalize(),
    )


async def drain(session: ConnectionSession) -> list:
    """Everything currently queued on a session, in order."""
    events = []
    while session.pending():
        events.append(await session.next_event())
    return events


class RecordingBlobStore:
    """BlobStore double that keeps payloads in memory."""

    def __init__(self):
        self.stored = []

    async def store(self, data, content_type, filename=None):
        self.stored.append((data, content_type, filename))
        return f"/files/blob-{len(self.stored)}"


# ==================== CORE FIXTURES ====================


@pytest.fixture()
def token_codec():
    return SessionTokenCodec(
        secret=TEST_SECRET,
        issuer="chatrelay",
        audience="chatrelay-clients",
        ttl_seconds=3600,
    )


@pytest.fixture()
def registry():
    return PresenceRegistry()


@pytest.fixture()
def message_log():
    return InMemoryMessageLog()


@pytest.fixture()
def blob_store():
    return RecordingBlobStore()


@pytest.fixture()
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture()
def engine(registry, message_log, blob_store):
    return MessageBroadcastEngine(
        registry=registry,
        message_log=message_log,
        blob_store=blob_store,
        storage_timeout=1.0,
        max_text_chars=100,
        max_attachment_bytes=1024,
    )


@pytest.fixture()
def controller(registry, engine, token_codec, credential_store):
    return ConnectionLifecycleController(
        registry=registry,
        engine=engine,
        token_codec=token_codec,
        credential_store=credential_store,
        close_on_auth_failure=False,
    )


# ==================== APP FIXTURES ====================


@pytest.fixture()
def app():
    """Create a new FastAPI app with its own container for each test."""
    return create_fastapi_app(app_container=create_container(backend="memory"))


@pytest.fixture()
def client(app):
    """
    A test client for the FastAPI app.

    Used as a context manager so every request and WebSocket shares one
    event loop, and the container is closed at the end.
    """
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client, username="alice", password="secret-pw", display_name=None):
    """Returns (token, user) for a freshly registered user."""
    res = client.post(
        "/auth/register",
        json={"username": username, "password": password, "display_name": display_name},
    )
    assert res.status_code == 201, res.text
    res = client.post("/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    body = res.json()
    return body["token"], body["user"]


@pytest.fixture()
def auth_headers(client):
    """Authentication headers for a registered user."""
    token, _ = register_and_login(client, username="reader")
    return {"Authorization": f"Bearer {token}"}
