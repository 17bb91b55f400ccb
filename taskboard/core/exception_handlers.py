"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Every handler answers with
the {"message", "data"} envelope used by successful responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.domain.exceptions import TaskboardException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "QUERY_PARSE_ERROR": 400,
    "DUPLICATE_EMAIL": 400,
    "ASSIGNMENT_CONFLICT": 400,
    "RESOURCE_NOT_FOUND": 404,
    "STORE_ERROR": 500,
}


def _envelope(status: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status, content={"message": message, "data": data})


def _taskboard_exception_handler(
    request: Request, exc: TaskboardException
) -> JSONResponse:
    """Return exc.to_dict() with the status for its error code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s: %s (%s)", exc.error_code, exc.message, exc.details)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to {"field", "message"} pairs."""
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "")})
    return errors


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 for malformed JSON or wrongly-typed fields."""
    errors = _field_errors(exc)
    summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    return _envelope(400, f"Validation Error: {summary}", errors)


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same envelope."""
    return _envelope(exc.status_code, str(exc.detail))


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500 with the raw error text as data."""
    logger.exception("Unhandled exception: %s", exc)
    return _envelope(500, "Internal server error", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: TaskboardException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(TaskboardException, _taskboard_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
