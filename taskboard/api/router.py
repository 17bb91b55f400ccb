"""API router aggregation.

Includes all endpoint modules with consistent prefix and tags. Mounted
under /api by create_app().
"""

from fastapi import APIRouter

from taskboard.api.endpoints import health, home, tasks, users
from taskboard.schemas.envelope import Envelope

api_router = APIRouter()

# Path "" on the router itself so the index is served at /api (no trailing slash).
api_router.add_api_route("", home.api_index, methods=["GET"], response_model=Envelope, tags=["home"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
