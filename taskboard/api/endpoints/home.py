"""API index: lists the resource collections."""

from taskboard.core.config import get_settings
from taskboard.schemas.envelope import Envelope

RESOURCES = ("tasks", "users")


async def api_index() -> Envelope:
    settings = get_settings()
    return Envelope(
        message="OK",
        data={
            "name": settings.app_name,
            "version": settings.app_version,
            "resources": [f"/api/{r}" for r in RESOURCES],
        },
    )
