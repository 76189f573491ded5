import json

import bcrypt
import httpx
import pytest
from fastapi.testclient import TestClient

from botsuite.core.config import BotConfig, settings
from botsuite.main import app
from botsuite.services.bot_service import BotService, get_bot_service
from botsuite.services.credential_store import CredentialStore, get_credential_store
from botsuite.services.gemini_service import GeminiClient
from botsuite.services.session_service import SessionStore, get_session_store
from botsuite.services.upload_service import ObjectUploader

BOB_HASH = bcrypt.hashpw(b"hunter2", bcrypt.gensalt(rounds=4)).decode("utf-8")

GEMINI_REPLY = {
    "candidates": [
        {
            "content": {
                "parts": [
                    {"text": "First paragraph."},
                    {"text": "Second paragraph.\n"},
                ]
            }
        }
    ]
}


class FakeGemini:
    """httpx.MockTransport handler standing in for the generative API."""

    def __init__(self):
        self.calls = []
        self.status_code = 200
        self.payload = GEMINI_REPLY
        self.error = None
        self.body_text = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if self.body_text is not None:
            return httpx.Response(self.status_code, text=self.body_text)
        return httpx.Response(self.status_code, json=self.payload)

    def last_body(self):
        return json.loads(self.calls[-1].content)


class FakeS3Client:
    def __init__(self):
        self.objects = []

    def put_object(self, **kwargs):
        kwargs["Body"] = kwargs["Body"].read()
        self.objects.append(kwargs)


@pytest.fixture
def users_file(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(json.dumps({
        "users": [
            {"uid": "a", "password": "right", "nickname": ""},
            {"uid": "bob", "password": BOB_HASH, "nickname": "Bob"},
        ]
    }))
    return path


@pytest.fixture
def store(users_file):
    return CredentialStore(str(users_file), allow_plaintext=True)


@pytest.fixture
def sessions():
    return SessionStore(secret="test-secret", max_age=3600)


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def bot_service(gemini, upload_dir):
    return BotService(
        bots={
            "image": BotConfig(model="image-model", api_key="image-key"),
            "report": BotConfig(model="report-model", api_key="report-key"),
            "data": BotConfig(model="data-model", api_key="data-key"),
        },
        client=GeminiClient(api_base="https://api.test", transport=httpx.MockTransport(gemini)),
        uploader=ObjectUploader(),
        upload_dir=str(upload_dir),
        max_upload_bytes=64 * 1024,
        text_limit=12000,
    )


@pytest.fixture
def public_dir(tmp_path, monkeypatch):
    path = tmp_path / "public"
    path.mkdir()
    for name in ("login", "nickname", "index", "report-generation"):
        (path / f"{name}.html").write_text(f"<html><body>{name}</body></html>")
    monkeypatch.setattr(settings, "PUBLIC_DIR", str(path))
    return path


@pytest.fixture
def client(store, sessions, bot_service):
    app.dependency_overrides[get_credential_store] = lambda: store
    app.dependency_overrides[get_session_store] = lambda: sessions
    app.dependency_overrides[get_bot_service] = lambda: bot_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, uid="bob", password="hunter2"):
    response = client.post("/api/login", json={"uid": uid, "password": password})
    assert response.status_code == 200, response.text
    return response
