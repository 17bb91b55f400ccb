"""Response envelope shared by every resource route."""

from typing import Any

from pydantic import BaseModel, Field


class Envelope(BaseModel):
    """{"message": ..., "data": ...} wrapper for all API responses."""

    message: str = Field(..., description="Human-readable outcome")
    data: Any = Field(default=None, description="Payload: document, list, count or error detail")
