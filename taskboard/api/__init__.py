"""HTTP API: routers and dependency wiring."""

from taskboard.api.router import api_router

__all__ = ["api_router"]
