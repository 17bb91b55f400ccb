"""Domain exceptions for the taskboard application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class TaskboardException(Exception):
    """Base exception for all taskboard application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP envelopes using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context returned as the envelope's data.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: Any = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional extra context (dict or list).
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details if details is not None else {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the response envelope for this error."""
        return {"message": self.message, "data": self.details}


class ValidationException(TaskboardException):
    """Raised when a request body misses a required field or has a bad value."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        """Initialize with message and the offending field names.

        Args:
            message: Description of the validation failure.
            fields: Optional fields that failed validation.
        """
        details = {"fields": fields} if fields else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class QueryParseException(TaskboardException):
    """Raised when a where/sort/select/skip/limit parameter cannot be parsed."""

    def __init__(self, parameter: str, reason: str) -> None:
        """Initialize with the parameter name and why it was rejected.

        Args:
            parameter: Query parameter name (e.g. 'where').
            reason: Human-readable reason.
        """
        super().__init__(
            f"Invalid '{parameter}' parameter. {reason}",
            "QUERY_PARSE_ERROR",
            {"parameter": parameter, "reason": reason},
        )


class ResourceNotFoundException(TaskboardException):
    """Raised when a record is missing or its identifier is not well-formed.

    Both cases are reported identically; callers cannot tell a malformed id
    from an id that matches nothing.
    """

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource ('task' or 'user').
            resource_id: The ID that was not found.
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type.capitalize()} not found.",
            "RESOURCE_NOT_FOUND",
            {},
        )


class DuplicateEmailException(TaskboardException):
    """Raised when creating or updating a user to an email another user owns."""

    def __init__(self, email: str) -> None:
        super().__init__(
            "A user with this email already exists.",
            "DUPLICATE_EMAIL",
            {"email": email},
        )


class TaskAssignmentConflictException(TaskboardException):
    """Raised when a user claims tasks that are assigned to a different user.

    details is the list of conflicting task ids.
    """

    def __init__(self, task_ids: list[str]) -> None:
        """Initialize with the conflicting task ids.

        Args:
            task_ids: Tasks already assigned to someone else.
        """
        self.task_ids = list(task_ids)
        super().__init__(
            "Conflict: One or more tasks are already assigned to another user.",
            "ASSIGNMENT_CONFLICT",
            self.task_ids,
        )


class StoreException(TaskboardException):
    """Raised when the document store fails (network, backend error)."""

    def __init__(self, message: str, cause: str | None = None) -> None:
        super().__init__(message, "STORE_ERROR", cause or "")
