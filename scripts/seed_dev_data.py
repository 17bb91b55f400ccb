"""Seed a running taskboard API with random users and tasks.

Everything goes through the HTTP API, so assignments made here exercise
the same pendingTasks bookkeeping as real clients.

Usage:
    uv run python -m scripts.seed_dev_data [base_url] [users] [tasks]

Defaults: http://localhost:8000/api, 20 users, 100 tasks. SEED_BASE_URL in
.env overrides the default base URL.
"""

from __future__ import annotations

import asyncio
import os
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
from dotenv import load_dotenv

FIRST_NAMES = ["alice", "bob", "carol", "dave", "erin", "frank", "grace", "heidi", "ivan", "judy"]
LAST_NAMES = ["smith", "jones", "lee", "garcia", "chen", "patel", "kim", "novak", "silva", "ito"]
VERBS = ["review", "write", "fix", "deploy", "test", "plan", "document", "refactor"]
NOUNS = ["report", "parser", "login page", "release", "backlog", "dashboard", "api", "schema"]


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so SEED_BASE_URL is picked up."""
    load_dotenv(_project_root() / ".env", override=True)


def _parse_args() -> tuple[str, int, int]:
    base_url = os.environ.get("SEED_BASE_URL", "http://localhost:8000/api")
    users, tasks = 20, 100
    args = sys.argv[1:]
    try:
        if len(args) > 0:
            base_url = args[0]
        if len(args) > 1:
            users = int(args[1])
        if len(args) > 2:
            tasks = int(args[2])
    except ValueError:
        print(
            "Usage: uv run python -m scripts.seed_dev_data [base_url] [users] [tasks]",
            file=sys.stderr,
        )
        sys.exit(1)
    return base_url.rstrip("/"), users, tasks


async def _create_users(client: httpx.AsyncClient, n: int) -> list[dict]:
    created = []
    for i in range(n):
        first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
        body = {
            "name": f"{first.title()} {last.title()}",
            "email": f"{first}.{last}.{i}@example.com",
        }
        resp = await client.post("/users", json=body)
        if resp.status_code != 201:
            print(f"  user {body['email']}: {resp.status_code} {resp.json().get('message')}")
            continue
        created.append(resp.json()["data"])
    return created


async def _create_tasks(client: httpx.AsyncClient, n: int, users: list[dict]) -> int:
    now = datetime.now(timezone.utc)
    count = 0
    for _ in range(n):
        body: dict = {
            "name": f"{random.choice(VERBS).title()} {random.choice(NOUNS)}",
            "description": "Seeded task",
            "deadline": (now + timedelta(days=random.randint(-10, 60))).isoformat(),
            "completed": random.random() < 0.3,
        }
        if users and random.random() < 0.6:
            body["assignedUser"] = random.choice(users)["_id"]
        resp = await client.post("/tasks", json=body)
        if resp.status_code != 201:
            print(f"  task {body['name']!r}: {resp.status_code} {resp.json().get('message')}")
            continue
        count += 1
    return count


async def main() -> None:
    """Create users first, then tasks randomly assigned to them."""
    _load_env()
    base_url, n_users, n_tasks = _parse_args()
    print(f"Seeding {base_url}: {n_users} users, {n_tasks} tasks")
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        users = await _create_users(client, n_users)
        print(f"Created {len(users)} users")
        tasks = await _create_tasks(client, n_tasks, users)
        print(f"Created {tasks} tasks")


if __name__ == "__main__":
    asyncio.run(main())
