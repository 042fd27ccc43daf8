import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app, get_gemini_client
from config.settings import Settings
from relay.upstream.gemini import GeminiClient

# A small 1x1 PNG base64 image (black pixel)
SAMPLE_IMAGE_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/w8AAn8B9pQn2wAAAABJRU5ErkJggg=="
)


def gemini_text_response(*texts):
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": t} for t in texts]}}
        ]
    }


class FakeGemini:
    """Stands in for the Gemini REST API behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = gemini_text_response("Hi there")
        self.error = None

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-1.5-flash")
    monkeypatch.setenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1")
    monkeypatch.delenv("UPSTREAM_TIMEOUT", raising=False)
    return Settings()


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def gemini_client(settings, gemini):
    return GeminiClient(settings, transport=httpx.MockTransport(gemini))


@pytest.fixture
def client(gemini_client):
    app.dependency_overrides[get_gemini_client] = lambda: gemini_client

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
