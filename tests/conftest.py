"""Shared fixtures: isolated stores and stubbed remote providers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

import httpx
import pytest

from moodshift.config import settings
from moodshift.main import app
from moodshift.runtime import Runtime, build_runtime
from moodshift.storage import BlobStore, DocumentStore

PUBLIC_BASE_URL = "http://test"
FAKE_AUDIO = b"ID3\x04fake-mp3-bytes"


@pytest.fixture
def documents(tmp_path) -> DocumentStore:
    return DocumentStore(tmp_path / "documents.db")


@pytest.fixture
def blobs(tmp_path) -> BlobStore:
    return BlobStore(tmp_path / "blobs")


def chat_response(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


@dataclass
class FakeProviders:
    """Scriptable stand-ins for the LLM and Polly endpoints."""

    reply: str = "You are doing great. One small step today."
    llm_status: int = 200
    llm_payload: dict | None = None
    polly_failing_engines: set[str] = field(default_factory=set)
    llm_requests: list[dict] = field(default_factory=list)
    polly_requests: list[dict] = field(default_factory=list)

    def llm_handler(self, request: httpx.Request) -> httpx.Response:
        self.llm_requests.append(json.loads(request.content))
        if self.llm_status != 200:
            return httpx.Response(self.llm_status, text="upstream exploded")
        if self.llm_payload is not None:
            return httpx.Response(200, json=self.llm_payload)
        return chat_response(json.dumps({"response": self.reply}))

    def polly_handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        body["_authorization"] = request.headers.get("authorization", "")
        self.polly_requests.append(body)
        if body["Engine"] in self.polly_failing_engines:
            return httpx.Response(400, text=f"engine {body['Engine']} unsupported")
        return httpx.Response(200, content=FAKE_AUDIO, headers={"content-type": "audio/mpeg"})


@pytest.fixture
def providers() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
def runtime(tmp_path, monkeypatch, providers) -> Runtime:
    monkeypatch.setattr(settings, "groq_api_key", "test-groq-key")
    monkeypatch.setattr(settings, "aws_access_key", "AKIDEXAMPLE")
    monkeypatch.setattr(settings, "aws_secret_key", "secret-example")
    monkeypatch.setattr(settings, "public_base_url", PUBLIC_BASE_URL)
    rt = build_runtime(
        tmp_path / "data",
        llm_transport=httpx.MockTransport(providers.llm_handler),
        polly_transport=httpx.MockTransport(providers.polly_handler),
    )
    app.state.runtime = rt
    yield rt
    app.state.runtime = None


@pytest.fixture
def client_factory(runtime):
    def _make() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url=PUBLIC_BASE_URL
        )

    return _make
