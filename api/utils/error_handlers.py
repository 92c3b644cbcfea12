"""
Global Exception Handlers

Registers exception handlers that turn every error raised while serving a
request into a consistent ``ErrorResponse`` body, logged at a severity
matching its status code.
"""

import json
import logging
import traceback
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse as StarletteJSONResponse

from api.models.errors import ErrorResponse, ValidationErrorResponse, ValidationErrorItem
from triage.analyzers.responder import ResponseGenerationError
from triage.models import StatusTransitionError

logger = logging.getLogger(__name__)


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime objects."""
    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class JSONResponse(StarletteJSONResponse):
    """JSONResponse that handles datetime serialization."""
    def render(self, content):
        return json.dumps(content, cls=DateTimeEncoder).encode("utf-8")


def add_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StatusTransitionError, status_transition_handler)
    app.add_exception_handler(ResponseGenerationError, generation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered")


def _error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: dict = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        status="error",
        message=message,
        error_code=error_code,
        details=details,
        timestamp=datetime.utcnow()
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump())


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions raised by route handlers."""
    log_exception(request, exc, exc.status_code)
    return _error_response(
        exc.status_code,
        str(exc.detail),
        f"HTTP_{exc.status_code}",
        getattr(exc, "details", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors with field-level detail."""
    log_exception(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY)

    validation_errors = [
        ValidationErrorItem(
            loc=[str(loc_item) for loc_item in error["loc"]],
            msg=error["msg"],
            type=error["type"]
        )
        for error in exc.errors()
    ]

    error_response = ValidationErrorResponse(
        status="error",
        message="Request validation error",
        error_code="VALIDATION_ERROR",
        validation_errors=validation_errors,
        timestamp=datetime.utcnow()
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump()
    )


async def status_transition_handler(
    request: Request,
    exc: StatusTransitionError
) -> JSONResponse:
    """Reject status changes that would break the reply lifecycle."""
    log_exception(request, exc, status.HTTP_409_CONFLICT)
    return _error_response(status.HTTP_409_CONFLICT, str(exc), "INVALID_STATUS_TRANSITION")


async def generation_error_handler(
    request: Request,
    exc: ResponseGenerationError
) -> JSONResponse:
    """Report a failed synchronous reply generation."""
    log_exception(request, exc, status.HTTP_502_BAD_GATEWAY)
    return _error_response(
        status.HTTP_502_BAD_GATEWAY,
        "Failed to generate response",
        "GENERATION_FAILED",
        {"reason": str(exc)},
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle all unhandled exceptions with a sanitized error response."""
    log_exception(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, include_traceback=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "INTERNAL_SERVER_ERROR",
        {"type": exc.__class__.__name__},
    )


def log_exception(
    request: Request,
    exc: Exception,
    status_code: int,
    include_traceback: bool = False
) -> None:
    """
    Log exception with request context and a severity matching the status code.

    Args:
        request: Request that caused exception
        exc: Exception instance
        status_code: HTTP status code
        include_traceback: Whether to include full traceback
    """
    if status_code >= 500:
        log_level = logging.ERROR
    elif status_code >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    error_message = f"Exception during request to {request.method} {request.url.path}"
    error_details = {
        "status_code": status_code,
        "error_type": exc.__class__.__name__,
        "error_message": str(exc),
        "client_host": request.client.host if request.client else "unknown"
    }

    if include_traceback:
        error_details["traceback"] = traceback.format_exc()

    logger.log(log_level, error_message, extra={"error_details": error_details})
