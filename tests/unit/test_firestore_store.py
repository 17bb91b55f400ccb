"""FirestoreDocumentStore against a mocked Firestore REST API (httpx.MockTransport)."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest

from taskboard.domain.exceptions import StoreException
from taskboard.domain.query import Condition, Operator, Projection, SortKey, StoreQuery
from taskboard.infrastructure.firebase import FirestoreDocumentStore
from taskboard.infrastructure.firebase._rest_client import FirestoreRESTClient
from taskboard.infrastructure.store import DuplicateKeyError

ROOT = "projects/demo/databases/(default)/documents"
USER_ID = "u" + "a" * 23
TASK_ID = "t" + "b" * 23


class Recorder:
    """Collects requests and answers them from a handler function."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


def _store(handler) -> tuple[FirestoreDocumentStore, Recorder]:
    recorder = Recorder(handler)
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    creds = SimpleNamespace(valid=True, token="test-token")
    client = FirestoreRESTClient("demo", creds, http_client=http)
    return FirestoreDocumentStore(client), recorder


def _user_doc(doc_id: str = USER_ID) -> dict:
    return {
        "name": f"{ROOT}/users/{doc_id}",
        "fields": {
            "name": {"stringValue": "Alice"},
            "email": {"stringValue": "a@example.com"},
            "pendingTasks": {"arrayValue": {"values": [{"stringValue": TASK_ID}]}},
            "dateCreated": {"timestampValue": "2025-01-15T12:00:00.123456789Z"},
        },
    }


async def test_get_decodes_document_and_sends_token() -> None:
    store, rec = _store(lambda req: httpx.Response(200, json=_user_doc()))
    doc = await store.get("users", USER_ID)
    assert doc == {
        "_id": USER_ID,
        "name": "Alice",
        "email": "a@example.com",
        "pendingTasks": [TASK_ID],
        "dateCreated": datetime(2025, 1, 15, 12, 0, 0, 123456, tzinfo=timezone.utc),
    }
    req = rec.requests[0]
    assert req.headers["Authorization"] == "Bearer test-token"
    assert req.url.path.endswith(f"/documents/users/{USER_ID}")


async def test_get_missing_returns_none() -> None:
    store, _ = _store(lambda req: httpx.Response(404, json={"error": {}}))
    assert await store.get("users", USER_ID) is None


async def test_get_applies_exclusion_projection() -> None:
    store, _ = _store(lambda req: httpx.Response(200, json=_user_doc()))
    doc = await store.get("users", USER_ID, Projection(("email",), include=False))
    assert "email" not in doc
    assert doc["name"] == "Alice"


async def test_find_builds_structured_query() -> None:
    results = [{"document": _user_doc()}, {"readTime": "2025-01-15T12:00:00Z"}]
    store, rec = _store(lambda req: httpx.Response(200, json=results))
    query = StoreQuery(
        conditions=(
            Condition("_id", Operator.IN, [USER_ID]),
            Condition("pendingTasks", Operator.EQ, TASK_ID),
        ),
        sort=(SortKey("name", descending=True),),
        projection=Projection(("name",)),
        skip=5,
        limit=10,
    )
    docs = await store.find("users", query)
    assert docs == [{"_id": USER_ID, "name": "Alice"}]

    body = rec.bodies()[0]["structuredQuery"]
    assert rec.requests[0].url.path.endswith(":runQuery")
    filters = body["where"]["compositeFilter"]["filters"]
    id_filter = filters[0]["fieldFilter"]
    assert id_filter["field"]["fieldPath"] == "__name__"
    assert id_filter["op"] == "IN"
    assert id_filter["value"]["arrayValue"]["values"] == [
        {"referenceValue": f"{ROOT}/users/{USER_ID}"}
    ]
    assert filters[1]["fieldFilter"]["op"] == "ARRAY_CONTAINS"
    assert body["orderBy"] == [{"field": {"fieldPath": "name"}, "direction": "DESCENDING"}]
    assert body["select"] == {"fields": [{"fieldPath": "name"}]}
    assert body["offset"] == 5
    assert body["limit"] == 10


async def test_count_uses_aggregation_query() -> None:
    payload = [{"result": {"aggregateFields": {"total": {"integerValue": "7"}}}}]
    store, rec = _store(lambda req: httpx.Response(200, json=payload))
    total = await store.count("tasks", (Condition("completed", Operator.EQ, False),))
    assert total == 7
    body = rec.bodies()[0]["structuredAggregationQuery"]
    assert body["aggregations"] == [{"alias": "total", "count": {}}]
    assert body["structuredQuery"]["where"]["fieldFilter"]["value"] == {"booleanValue": False}


async def test_insert_reserves_unique_email() -> None:
    def handler(req: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    store, rec = _store(handler)
    doc = {"_id": USER_ID, "name": "Alice", "email": "a@example.com", "pendingTasks": []}
    assert await store.insert("users", doc) == doc

    reserve, create = rec.requests
    assert reserve.url.path.endswith("/documents/users_email_index")
    assert reserve.url.params["documentId"] == "a@example.com"
    assert create.url.params["documentId"] == USER_ID
    assert "_id" not in json.loads(create.content)["fields"]


async def test_insert_duplicate_email_raises() -> None:
    def handler(req: httpx.Request) -> httpx.Response:
        if req.method == "POST":
            return httpx.Response(409, json={"error": {"status": "ALREADY_EXISTS"}})
        # Reservation lookup: owned by someone else.
        return httpx.Response(
            200,
            json={"name": f"{ROOT}/users_email_index/x", "fields": {"owner": {"stringValue": "other"}}},
        )

    store, rec = _store(handler)
    with pytest.raises(DuplicateKeyError) as exc_info:
        await store.insert("users", {"_id": USER_ID, "name": "A", "email": "a@example.com"})
    assert exc_info.value.field == "email"
    # The user document itself was never created.
    assert not any(r.url.params.get("documentId") == USER_ID for r in rec.requests)


async def test_add_to_array_commits_field_transform() -> None:
    store, rec = _store(lambda req: httpx.Response(200, json={"writeResults": [{}]}))
    assert await store.add_to_array("users", USER_ID, "pendingTasks", [TASK_ID]) is True
    write = rec.bodies()[0]["writes"][0]
    assert write["currentDocument"] == {"exists": True}
    assert write["transform"]["document"] == f"{ROOT}/users/{USER_ID}"
    assert write["transform"]["fieldTransforms"] == [
        {"fieldPath": "pendingTasks", "appendMissingElements": {"values": [{"stringValue": TASK_ID}]}}
    ]


async def test_remove_from_array_missing_document_returns_false() -> None:
    store, rec = _store(lambda req: httpx.Response(404, json={}))
    assert await store.remove_from_array("users", USER_ID, "pendingTasks", [TASK_ID]) is False
    transform = rec.bodies()[0]["writes"][0]["transform"]["fieldTransforms"][0]
    assert "removeAllFromArray" in transform


async def test_update_many_patches_each_match_with_mask() -> None:
    def handler(req: httpx.Request) -> httpx.Response:
        if req.url.path.endswith(":runQuery"):
            return httpx.Response(
                200,
                json=[
                    {"document": {"name": f"{ROOT}/tasks/{TASK_ID}"}},
                    {"document": {"name": f"{ROOT}/tasks/other"}},
                ],
            )
        return httpx.Response(200, json={})

    store, rec = _store(handler)
    changed = await store.update_many(
        "tasks", (Condition("assignedUser", Operator.EQ, USER_ID),), {"assignedUser": ""}
    )
    assert changed == 2
    patches = [r for r in rec.requests if r.method == "PATCH"]
    assert len(patches) == 2
    assert patches[0].url.params.get_list("updateMask.fieldPaths") == ["assignedUser"]
    assert patches[0].url.params["currentDocument.exists"] == "true"


async def test_http_error_becomes_store_exception() -> None:
    store, _ = _store(lambda req: httpx.Response(500, json={"error": "boom"}))
    with pytest.raises(StoreException) as exc_info:
        await store.find("tasks", StoreQuery())
    assert exc_info.value.error_code == "STORE_ERROR"


def _pending_docs() -> list[dict]:
    """Two users: one pending TASK_ID, one with an empty list."""
    holder = _user_doc()
    holder["fields"]["pendingTasks"]["arrayValue"]["values"].append({"stringValue": "x"})
    free = _user_doc("u" + "c" * 23)
    free["fields"]["pendingTasks"] = {"arrayValue": {}}
    return [{"document": holder}, {"document": free}]


async def test_array_not_equal_is_evaluated_as_does_not_contain() -> None:
    store, rec = _store(lambda req: httpx.Response(200, json=_pending_docs()))
    query = StoreQuery(
        conditions=(
            Condition("pendingTasks", Operator.NE, TASK_ID),
            Condition("name", Operator.EQ, "Alice"),
        ),
        skip=0,
        limit=1,
    )
    docs = await store.find("users", query)
    assert [d["_id"] for d in docs] == ["u" + "c" * 23]

    body = rec.bodies()[0]["structuredQuery"]
    # Only the scalar filter goes to the server; paging follows the local filter.
    assert body["where"]["fieldFilter"]["field"]["fieldPath"] == "name"
    assert "limit" not in body
    assert "offset" not in body


async def test_array_not_in_and_literal_list_match_memory_semantics() -> None:
    store, _ = _store(lambda req: httpx.Response(200, json=_pending_docs()))
    nin = StoreQuery(conditions=(Condition("pendingTasks", Operator.NIN, ["x", "y"]),))
    assert [d["_id"] for d in await store.find("users", nin)] == ["u" + "c" * 23]

    literal = StoreQuery(conditions=(Condition("pendingTasks", Operator.EQ, [TASK_ID, "x"]),))
    assert [d["_id"] for d in await store.find("users", literal)] == [USER_ID]


async def test_count_with_array_not_equal_scans_selected_field() -> None:
    store, rec = _store(lambda req: httpx.Response(200, json=_pending_docs()))
    total = await store.count("users", (Condition("pendingTasks", Operator.NE, TASK_ID),))
    assert total == 1
    assert rec.requests[0].url.path.endswith(":runQuery")
    body = rec.bodies()[0]["structuredQuery"]
    assert body["select"] == {"fields": [{"fieldPath": "pendingTasks"}]}
    assert "where" not in body
