"""Pytest configuration and fixtures for taskboard.

HTTP tests run against an app built by create_app() over a fresh
MemoryDocumentStore per test; the store fixture lets tests inspect
documents directly.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from taskboard.infrastructure.collections import UNIQUE_FIELDS
from taskboard.infrastructure.store import MemoryDocumentStore
from taskboard.main import create_app

DEADLINE = "2030-01-01T00:00:00Z"


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Empty in-memory store with the users.email uniqueness rule."""
    return MemoryDocumentStore(unique_fields=UNIQUE_FIELDS)


@pytest.fixture
async def client(store: MemoryDocumentStore) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(client: AsyncClient) -> Callable[..., Awaitable[dict[str, Any]]]:
    """POST /api/users and return the created document."""

    async def _make(name: str = "Alice", email: str | None = None, **extra: Any) -> dict:
        body = {"name": name, "email": email or f"{name.lower()}@example.com", **extra}
        resp = await client.post("/api/users", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _make


@pytest.fixture
def make_task(client: AsyncClient) -> Callable[..., Awaitable[dict[str, Any]]]:
    """POST /api/tasks and return the created document."""

    async def _make(name: str = "Write report", **extra: Any) -> dict:
        body = {"name": name, "deadline": DEADLINE, **extra}
        resp = await client.post("/api/tasks", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _make


@pytest.fixture
def fetch(client: AsyncClient) -> Callable[[str, str], Awaitable[dict[str, Any]]]:
    """GET /api/<resource>/<id> and return the document."""

    async def _fetch(resource: str, doc_id: str) -> dict:
        resp = await client.get(f"/api/{resource}/{doc_id}")
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]

    return _fetch
