"""
Shared fixtures.

The environment is pinned before any ``app`` import so that importing
``app.main`` never touches the real storage directory or log directory.
"""

import json
import os
import tempfile

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="grievance-logs-"))
os.environ.setdefault("ENVIRONMENT", "testing")

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.services.integrations.hostel_api import HostelApiClient, create_http_client
from app.services.storage import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        STORAGE_BACKEND="memory",
        LOG_DIR=str(tmp_path / "logs"),
        ENVIRONMENT="testing",
        UPSTREAM_API_BASE_URL="http://hostel.test/api",
    )


@pytest.fixture
def complaints():
    return [
        {
            "id": 1,
            "title": "Leaking tap",
            "type": "plumbing",
            "status": "resolved",
            "priority": "high",
            "createdAt": "2025-01-10T09:00:00Z",
            "updatedAt": "2025-01-10T14:00:00Z",
            "resolvedAt": "2025-01-10T14:00:00Z",
            "student": {"id": 7, "name": "Asha", "roomNo": "B-12"},
        },
        {
            "id": 2,
            "title": "Fan not working",
            "type": "electricity",
            "status": "open",
            "createdAt": "2025-01-15T08:30:00Z",
            "student": {"id": 8, "name": "Ravi", "roomNo": "A-03"},
        },
        {
            "id": 3,
            "title": "Dusty corridor",
            "type": "cleanliness",
            "status": "in-progress",
            "createdAt": "2025-02-01T12:00:00Z",
            "updatedAt": "2025-02-02T12:00:00Z",
            "student": {"id": 7, "name": "Asha", "roomNo": "B-12"},
        },
    ]


@pytest.fixture
def apologies():
    return [
        {
            "id": 11,
            "type": "outing",
            "message": "Returned late from home",
            "status": "submitted",
            "createdAt": "2025-01-20T18:00:00Z",
            "student": {"id": 7, "name": "Asha", "roomNo": "B-12"},
        },
        {
            "id": 12,
            "type": "misconduct",
            "message": "Loud music after hours",
            "status": "rejected",
            "createdAt": "2025-01-22T18:00:00Z",
            "student": {"id": 8, "name": "Ravi", "roomNo": "A-03"},
        },
    ]


class FakeHostelApi:
    """
    In-memory stand-in for the hostel REST API behind an ``httpx.MockTransport``.

    ``routes`` maps ``(METHOD, path)`` to a callable taking the request and
    returning a response; every request is recorded in ``calls``.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, json_body=None, status_code=200, text=None, handler=None):
        """Register a canned answer; a fresh response is built for every call."""
        if handler is None:
            if text is not None:
                handler = lambda request: httpx.Response(status_code, text=text)
            elif json_body is None:
                handler = lambda request: httpx.Response(status_code)
            else:
                handler = lambda request: httpx.Response(status_code, json=json_body)
        self.routes[(method.upper(), path)] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last(self, method, path):
        for request in reversed(self.calls):
            if request.method == method and request.url.path.endswith(path):
                return request
        return None

    def body(self, method, path):
        request = self.last(method, path)
        return json.loads(request.content) if request is not None else None


@pytest.fixture
def upstream():
    return FakeHostelApi()


@pytest.fixture
def api_client(upstream):
    """HostelApiClient talking to the fake upstream; close is left to GC."""
    http = create_http_client("http://hostel.test/api", transport=upstream.transport)
    return HostelApiClient(http, token="tok-123")


@pytest.fixture
def app(settings, upstream):
    from app.main import create_app

    return create_app(settings, transport=upstream.transport)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def login(client, upstream, role="admin", token="tok-admin"):
    upstream.add("POST", "/login", json_body={"message": "ok", "token": token, "role": role})
    response = client.post("/api/v1/session/login", json={"email": "w@hostel.test", "password": "pw"})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client, upstream):
    return login(client, upstream, role="admin", token="tok-admin")


@pytest.fixture
def student_headers(client, upstream):
    return login(client, upstream, role="student", token="tok-student")
