"""
Error Handlers
Marketplace exceptions and the FastAPI handlers that render them.

Every error body carries a top-level ``message`` (read by the client) and an
``error`` object with the message, exception type and details.
"""

import logging
from typing import Any, Optional, Union
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequestError(APIError):
    """Request is well-formed but not allowed in the current state (400)."""

    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDeniedError(APIError):
    """Caller is authenticated but may not act on the resource (403)."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message)


class ResourceNotFoundError(APIError):
    """Exception raised when resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Union[int, str]):
        super().__init__(
            f"{resource} not found: {resource_id}",
            details={"resource": resource, "id": resource_id},
        )


class ConflictError(APIError):
    """Duplicate submission or a decision on an already-decided record (409)."""

    status_code = status.HTTP_409_CONFLICT


class ResearchDispatchError(APIError):
    """Research task could not be handed to the worker queue (503)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def error_response(
    status_code: int, message: str, error_type: str, details: Any = None, summary: Optional[str] = None
) -> JSONResponse:
    """Build the JSON error envelope shared by all handlers."""
    error = {"message": message, "type": error_type}
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"message": summary or message, "error": error},
    )


def _validation_details(exc: RequestValidationError) -> list:
    # Drop the "body"/"query" prefix so locations read as field names
    details = []
    for error in exc.errors():
        loc = [part for part in error.get("loc", []) if part not in ("body", "query", "path")]
        details.append(
            {
                "field": ".".join(str(part) for part in loc),
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": error.get("type", ""),
            }
        )
    return details


def setup_error_handlers(app: FastAPI) -> None:
    """
    Set up custom error handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}",
            extra={"status_code": exc.status_code, "details": exc.details},
        )
        return error_response(exc.status_code, exc.message, exc.__class__.__name__, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = _validation_details(exc)
        logger.warning(f"Validation failed on {request.url.path}: {len(details)} error(s)")
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Request validation failed",
            "ValidationError",
            details,
            summary=details[0]["msg"] if details else None,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error: {exc}", exc_info=True, extra={"path": request.url.path})
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "InternalServerError",
        )
