"""Pytest configuration and shared fixtures."""

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from diary_proxy.admin_auth import issue_token
from diary_proxy.server import create_app
from diary_proxy.settings import Settings


# ============================================================================
# Fake OpenRouter
# ============================================================================

class FakeUpstream:
    """httpx transport handler standing in for OpenRouter."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, object] = {}

    def reply(self, path: str, status: int = 200, json_body=None, content: bytes | None = None):
        if content is not None:
            self.routes[path] = httpx.Response(status, content=content)
        else:
            self.routes[path] = httpx.Response(status, json=json_body)

    def fail(self, path: str, exc: Exception):
        self.routes[path] = exc

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    def last_json(self, path: str) -> dict:
        return json.loads(self.calls(path)[-1].content)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path, result in self.routes.items():
            if request.url.path.endswith(path):
                if isinstance(result, Exception):
                    raise result
                return result
        return httpx.Response(404, json={"error": {"message": "not found"}})


# ============================================================================
# App
# ============================================================================

@pytest.fixture
def settings():
    return Settings(
        openrouter_api_key="sk-or-test",
        base_url="https://upstream.test/api/v1",
        model="test/diary-model",
        frontend_api_key="frontend-secret",
        admin_username="admin",
        admin_password="hunter2",
        app_url="https://diary.test",
        app_title="Diary Assistant",
        upstream_timeout=5.0,
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def app(settings, upstream):
    return create_app(settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle)))


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {issue_token('admin')}"}
