"""Task API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from taskboard.application.dtos.task import TaskWrite


class TaskRequest(BaseModel):
    """Body for POST /tasks and PUT /tasks/{id}.

    Every field is optional here; required fields are checked by the
    service so the error message is the same for missing and empty values.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    description: str | None = None
    deadline: datetime | None = None
    completed: bool | None = None
    assigned_user: str | None = Field(default=None, alias="assignedUser")
    assigned_user_name: str | None = Field(default=None, alias="assignedUserName")

    def to_write(self) -> TaskWrite:
        return TaskWrite(
            name=self.name,
            description=self.description,
            deadline=self.deadline,
            completed=self.completed,
            assigned_user=self.assigned_user,
            assigned_user_name=self.assigned_user_name,
        )
