"""API request/response schemas (pydantic)."""

from taskboard.schemas.envelope import Envelope
from taskboard.schemas.health import HealthResponse
from taskboard.schemas.task import TaskRequest
from taskboard.schemas.user import UserRequest

__all__ = ["Envelope", "HealthResponse", "TaskRequest", "UserRequest"]
