"""Store failures surface as 500 envelopes; earlier sync writes are kept and logged."""

import logging

import pytest
from httpx import AsyncClient

from taskboard.domain.exceptions import StoreException
from taskboard.infrastructure.collections import UNIQUE_FIELDS
from taskboard.infrastructure.store import MemoryDocumentStore

DEADLINE = "2030-01-01T00:00:00Z"


class FailingStore(MemoryDocumentStore):
    """Memory store whose listed methods raise StoreException."""

    def __init__(self) -> None:
        super().__init__(unique_fields=UNIQUE_FIELDS)
        self.failing: set[str] = set()

    def _check(self, method: str) -> None:
        if method in self.failing:
            raise StoreException(f"Document store error during {method}", "disk full")

    async def find(self, collection, query):
        self._check("find")
        return await super().find(collection, query)

    async def add_to_array(self, collection, doc_id, field, values):
        self._check("add_to_array")
        return await super().add_to_array(collection, doc_id, field, values)


@pytest.fixture
def store() -> FailingStore:
    return FailingStore()


async def test_store_error_returns_500_with_raw_text(
    client: AsyncClient, store: FailingStore
) -> None:
    store.failing.add("find")
    resp = await client.get("/api/tasks")
    assert resp.status_code == 500
    assert resp.json() == {
        "message": "Document store error during find",
        "data": "disk full",
    }


async def test_partial_task_create_keeps_insert_and_logs(
    client: AsyncClient,
    store: FailingStore,
    make_user,
    fetch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    alice = await make_user("Alice")
    store.failing.add("add_to_array")

    with caplog.at_level(logging.ERROR):
        resp = await client.post(
            "/api/tasks",
            json={"name": "Ship", "deadline": DEADLINE, "assignedUser": alice["_id"]},
        )
    assert resp.status_code == 500
    assert resp.json()["data"] == "disk full"
    assert "Partial write during create task" in caplog.text
    assert "inserted task" in caplog.text

    store.failing.clear()
    listed = (await client.get("/api/tasks")).json()["data"]
    assert len(listed) == 1
    assert listed[0]["assignedUser"] == alice["_id"]
    assert listed[0]["name"] == "Ship"
    # The push to the user's pending list never happened.
    assert (await fetch("users", alice["_id"]))["pendingTasks"] == []
