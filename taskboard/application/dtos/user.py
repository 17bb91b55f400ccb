"""DTOs for user use cases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UserWrite:
    """Body of a user create or full replace.

    pending_tasks is None when the client did not send the field.
    """

    name: str | None = None
    email: str | None = None
    pending_tasks: list[str] | None = None
