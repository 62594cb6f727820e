"""API exceptions and handlers rendering the uniform response envelope."""

import logging
import traceback
import uuid
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """
    Base exception for errors rendered as ``{success: false, message, errors?}``.

    Every subclass fixes the HTTP status and a default message; callers may
    override the message and attach a list of field-level errors.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Any]] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(
            status_code=status_code or self.status_code,
            detail=self.message,
            headers=headers,
        )

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ApiError):
    """Exception for request validation errors."""

    status_code = 400
    default_message = "Validation Error"


class AuthenticationError(ApiError):
    """Exception for missing or invalid credentials."""

    status_code = 401
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message=message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(ApiError):
    """Exception for role or ownership mismatches."""

    status_code = 403
    default_message = "Access denied"


class NotFoundError(ApiError):
    """Exception for resource not found errors."""

    status_code = 404

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message=message or f"{resource_type.capitalize()} not found")


class ConflictError(ApiError):
    """Exception for requests conflicting with the current resource state."""

    status_code = 409
    default_message = "The request conflicts with the current state of the resource"


class BookingAlreadyConfirmedError(ConflictError):
    """Raised when confirming a booking that is already confirmed."""

    status_code = 400
    default_message = "Booking is already confirmed"


class InvalidStatusTransitionError(ConflictError):
    """Raised when a booking status change is not permitted."""

    status_code = 400

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        self.current = current
        self.target = target
        super().__init__(
            message=message or f"Cannot change booking status from '{current}' to '{target}'"
        )


class PackageNotBookableError(ConflictError):
    """Raised when a booking references a package that is not published."""

    status_code = 400
    default_message = "Package is not available for booking"


class StorageError(ApiError):
    """Wraps persistence failures; rendered as a generic 500."""

    status_code = 500
    default_message = "Internal server error"


def _envelope_500(exc: Exception) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "message": "Internal server error",
        "error_id": str(uuid.uuid4()),
    }
    if not settings.is_production:
        body["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return body


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """
    Exception handler for ApiError and its subclasses.

    Args:
        request: FastAPI request object
        exc: Raised API error

    Returns:
        JSONResponse: Error envelope
    """
    if exc.status_code >= 500:
        logger.error(
            "Request failed with server error",
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(status_code=exc.status_code, content=_envelope_500(exc))

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework-raised HTTP errors (unknown route, bad method) in the envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert FastAPI body/query validation failures to a 400 envelope.

    Each error carries the dotted field path and the validation message.
    """
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(location),
            "message": error.get("msg", "Invalid value"),
        })

    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation Error", "errors": errors},
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Render database failures as a generic 500."""
    logger.error(
        "Database error while processing request",
        extra={"path": request.url.path, "error": str(exc)},
        exc_info=True,
    )
    return JSONResponse(status_code=500, content=_envelope_500(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler for anything not otherwise handled.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: 500 envelope, with a stack trace outside production
    """
    logger.error(
        "Unhandled exception",
        extra={"path": request.url.path, "error": str(exc)},
        exc_info=True,
    )
    return JSONResponse(status_code=500, content=_envelope_500(exc))


def register_exception_handlers(app) -> None:
    """Attach every handler to the application."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
