"""Tests for /api/users: CRUD, email uniqueness and list queries."""

import json

from httpx import AsyncClient

from taskboard.shared.utils.generators import generate_cuid

REQUIRED = "Validation Error: 'name' and 'email' are required fields."
DUPLICATE = "A user with this email already exists."


async def test_create_user(client: AsyncClient) -> None:
    resp = await client.post("/api/users", json={"name": "Alice", "email": "a@example.com"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "New user created successfully."
    data = body["data"]
    assert data["name"] == "Alice"
    assert data["email"] == "a@example.com"
    assert data["pendingTasks"] == []
    assert data["dateCreated"]
    assert len(data["_id"]) == 24


async def test_create_user_missing_fields_returns_400(client: AsyncClient) -> None:
    for body in ({}, {"name": "Alice"}, {"email": "a@example.com"}, {"name": "", "email": "x"}):
        resp = await client.post("/api/users", json=body)
        assert resp.status_code == 400
        assert resp.json()["message"] == REQUIRED


async def test_create_user_duplicate_email_returns_400(client: AsyncClient, make_user) -> None:
    await make_user("Alice", "a@example.com")
    resp = await client.post("/api/users", json={"name": "Other", "email": "a@example.com"})
    assert resp.status_code == 400
    assert resp.json()["message"] == DUPLICATE
    count = await client.get("/api/users", params={"count": "true"})
    assert count.json()["data"] == 1


async def test_get_user_404(client: AsyncClient) -> None:
    for user_id in ("nope", generate_cuid()):
        resp = await client.get(f"/api/users/{user_id}")
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found."


async def test_get_user_select_with_id_alias(client: AsyncClient, make_user) -> None:
    user = await make_user("Alice")
    resp = await client.get(
        f"/api/users/{user['_id']}", params={"select": json.dumps({"id": 0, "email": 0})}
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert "_id" not in data
    assert "email" not in data
    assert data["name"] == "Alice"


async def test_replace_user_keeps_pending_when_absent(
    client: AsyncClient, make_user, make_task
) -> None:
    user = await make_user("Alice")
    task = await make_task(assignedUser=user["_id"])
    resp = await client.put(
        f"/api/users/{user['_id']}", json={"name": "Alice B", "email": "ab@example.com"}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "User updated successfully."
    assert body["data"]["pendingTasks"] == [task["_id"]]
    assert body["data"]["dateCreated"] == user["dateCreated"]


async def test_replace_user_same_email_is_allowed(client: AsyncClient, make_user) -> None:
    user = await make_user("Alice", "a@example.com")
    resp = await client.put(
        f"/api/users/{user['_id']}", json={"name": "Alice", "email": "a@example.com"}
    )
    assert resp.status_code == 200


async def test_replace_user_duplicate_email_returns_400(client: AsyncClient, make_user) -> None:
    await make_user("Alice", "a@example.com")
    bob = await make_user("Bob", "b@example.com")
    resp = await client.put(
        f"/api/users/{bob['_id']}", json={"name": "Bob", "email": "a@example.com"}
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == DUPLICATE


async def test_replace_user_404_before_validation(client: AsyncClient) -> None:
    resp = await client.put(f"/api/users/{generate_cuid()}", json={})
    assert resp.status_code == 404


async def test_delete_user(client: AsyncClient, make_user) -> None:
    user = await make_user()
    resp = await client.delete(f"/api/users/{user['_id']}")
    assert resp.status_code == 200
    assert resp.json()["message"] == "User deleted successfully."
    assert (await client.get(f"/api/users/{user['_id']}")).status_code == 404


async def test_list_users_unlimited_by_default(client: AsyncClient, make_user) -> None:
    for i in range(3):
        await make_user(f"User{i}")
    resp = await client.get("/api/users", params={"sort": json.dumps({"name": 1})})
    assert resp.status_code == 200
    assert [u["name"] for u in resp.json()["data"]] == ["User0", "User1", "User2"]


async def test_list_users_where_pending_contains(
    client: AsyncClient, make_user, make_task
) -> None:
    alice = await make_user("Alice")
    await make_user("Bob")
    task = await make_task(assignedUser=alice["_id"])
    resp = await client.get(
        "/api/users", params={"where": json.dumps({"pendingTasks": task["_id"]})}
    )
    assert [u["name"] for u in resp.json()["data"]] == ["Alice"]
