"""MemoryDocumentStore: query evaluation, uniqueness and array updates."""

import pytest

from taskboard.domain.query import Condition, Operator, Projection, SortKey, StoreQuery, eq
from taskboard.infrastructure.store import DuplicateKeyError, MemoryDocumentStore


@pytest.fixture
async def store() -> MemoryDocumentStore:
    s = MemoryDocumentStore(unique_fields={"users": ("email",)})
    for i, (name, done) in enumerate([("b", False), ("a", True), ("c", False), ("a", False)]):
        await s.insert("tasks", {"_id": f"t{i}", "name": name, "completed": done})
    return s


async def test_find_filters_sorts_and_pages(store: MemoryDocumentStore) -> None:
    query = StoreQuery(
        conditions=(eq("completed", False),),
        sort=(SortKey("name"), SortKey("_id", descending=True)),
        skip=1,
        limit=2,
    )
    docs = await store.find("tasks", query)
    assert [d["_id"] for d in docs] == ["t0", "t2"]


async def test_multi_key_sort_is_stable(store: MemoryDocumentStore) -> None:
    docs = await store.find("tasks", StoreQuery(sort=(SortKey("name"), SortKey("completed"))))
    assert [d["_id"] for d in docs] == ["t3", "t1", "t0", "t2"]


async def test_operators(store: MemoryDocumentStore) -> None:
    async def ids(*conditions: Condition) -> list[str]:
        return sorted(d["_id"] for d in await store.find("tasks", StoreQuery(conditions=conditions)))

    assert await ids(Condition("name", Operator.NE, "a")) == ["t0", "t2"]
    assert await ids(Condition("name", Operator.GT, "a")) == ["t0", "t2"]
    assert await ids(Condition("name", Operator.LTE, "b")) == ["t0", "t1", "t3"]
    assert await ids(Condition("_id", Operator.IN, ["t1", "t9"])) == ["t1"]
    assert await ids(Condition("_id", Operator.NIN, ["t1", "t2"])) == ["t0", "t3"]
    # Missing fields never satisfy range comparisons.
    assert await ids(Condition("deadline", Operator.LT, "z")) == []


async def test_projection(store: MemoryDocumentStore) -> None:
    doc = await store.get("tasks", "t0", Projection(("name",)))
    assert doc == {"_id": "t0", "name": "b"}
    doc = await store.get("tasks", "t0", Projection(("name",), include=False, exclude_id=True))
    assert doc == {"completed": False}


async def test_returned_documents_are_copies(store: MemoryDocumentStore) -> None:
    doc = await store.get("tasks", "t0")
    doc["name"] = "changed"
    assert (await store.get("tasks", "t0"))["name"] == "b"


async def test_count(store: MemoryDocumentStore) -> None:
    assert await store.count("tasks", ()) == 4
    assert await store.count("tasks", (eq("name", "a"),)) == 2


async def test_unique_field_on_insert_and_replace() -> None:
    store = MemoryDocumentStore(unique_fields={"users": ("email",)})
    await store.insert("users", {"_id": "u1", "email": "a@x"})
    await store.insert("users", {"_id": "u2", "email": "b@x"})
    with pytest.raises(DuplicateKeyError) as exc_info:
        await store.insert("users", {"_id": "u3", "email": "a@x"})
    assert exc_info.value.field == "email"
    with pytest.raises(DuplicateKeyError):
        await store.replace("users", "u2", {"_id": "u2", "email": "a@x"})
    # Re-saving a document with its own email is fine.
    assert await store.replace("users", "u1", {"_id": "u1", "email": "a@x", "n": 1})


async def test_replace_and_delete_missing(store: MemoryDocumentStore) -> None:
    assert await store.replace("tasks", "nope", {"_id": "nope"}) is None
    assert await store.delete("tasks", "nope") is None
    deleted = await store.delete("tasks", "t0")
    assert deleted["name"] == "b"
    assert await store.get("tasks", "t0") is None


async def test_update_many(store: MemoryDocumentStore) -> None:
    changed = await store.update_many("tasks", (eq("name", "a"),), {"completed": True})
    assert changed == 2
    assert await store.count("tasks", (eq("completed", True),)) == 2


async def test_array_add_is_set_like_and_remove_pulls_all() -> None:
    store = MemoryDocumentStore()
    await store.insert("users", {"_id": "u1", "pendingTasks": ["x"]})
    assert await store.add_to_array("users", "u1", "pendingTasks", ["x", "y"])
    assert (await store.get("users", "u1"))["pendingTasks"] == ["x", "y"]
    assert await store.remove_from_array("users", "u1", "pendingTasks", ["x"])
    assert (await store.get("users", "u1"))["pendingTasks"] == ["y"]
    assert await store.add_to_array("users", "missing", "pendingTasks", ["x"]) is False
    # Scalar equality on an array field means "contains".
    found = await store.find("users", StoreQuery(conditions=(eq("pendingTasks", "y"),)))
    assert [d["_id"] for d in found] == ["u1"]
