"""User API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from taskboard.application.dtos.user import UserWrite


class UserRequest(BaseModel):
    """Body for POST /users and PUT /users/{id}.

    pending_tasks stays None when the client omits pendingTasks, which on
    PUT means "keep the stored list".
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    email: str | None = None
    pending_tasks: list[str] | None = Field(default=None, alias="pendingTasks")

    def to_write(self) -> UserWrite:
        return UserWrite(name=self.name, email=self.email, pending_tasks=self.pending_tasks)
