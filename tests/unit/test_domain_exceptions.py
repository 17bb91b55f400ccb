"""Tests for domain exceptions (error_code, message, details)."""

from taskboard.domain.exceptions import (
    DuplicateEmailException,
    QueryParseException,
    ResourceNotFoundException,
    StoreException,
    TaskAssignmentConflictException,
    TaskboardException,
    ValidationException,
)


def test_taskboard_exception_default_error_code() -> None:
    """Base TaskboardException uses class name as error_code when not provided."""
    exc = TaskboardException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "TaskboardException"
    assert exc.details == {}
    assert exc.to_dict() == {"message": "Something failed", "data": {}}


def test_validation_exception_fields() -> None:
    exc = ValidationException("Bad", fields=["name"])
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"fields": ["name"]}
    assert ValidationException("Bad").details == {}


def test_query_parse_exception_message() -> None:
    exc = QueryParseException("where", "Must be valid JSON.")
    assert exc.message == "Invalid 'where' parameter. Must be valid JSON."
    assert exc.error_code == "QUERY_PARSE_ERROR"
    assert exc.details == {"parameter": "where", "reason": "Must be valid JSON."}


def test_resource_not_found_message_per_type() -> None:
    assert ResourceNotFoundException("task", "x").message == "Task not found."
    exc = ResourceNotFoundException("user", "y")
    assert exc.message == "User not found."
    assert exc.resource_id == "y"
    assert exc.to_dict() == {"message": "User not found.", "data": {}}


def test_duplicate_email() -> None:
    exc = DuplicateEmailException("a@example.com")
    assert exc.message == "A user with this email already exists."
    assert exc.error_code == "DUPLICATE_EMAIL"


def test_assignment_conflict_data_is_id_list() -> None:
    exc = TaskAssignmentConflictException(["t1", "t2"])
    assert exc.error_code == "ASSIGNMENT_CONFLICT"
    assert exc.to_dict() == {
        "message": "Conflict: One or more tasks are already assigned to another user.",
        "data": ["t1", "t2"],
    }


def test_store_exception_carries_cause() -> None:
    exc = StoreException("Document store error during find", "503 Service Unavailable")
    assert exc.error_code == "STORE_ERROR"
    assert exc.details == "503 Service Unavailable"
