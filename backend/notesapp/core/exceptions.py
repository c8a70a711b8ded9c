"""
Custom exception classes for unified error handling.

Services raise these; the handlers registered in `register_exception_handlers`
turn them into JSON responses. Anything else is an internal error: logged with
its traceback, surfaced to the caller as a generic message.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for invalid_text_representation, e.g. a malformed uuid
INVALID_TEXT_REPRESENTATION = "22P02"


class AppBaseError(Exception):
    """Base exception for all application errors."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(AppBaseError):
    """Malformed or missing input, or a reference the caller does not own."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppBaseError):
    """Raised when credentials or the bearer token are rejected."""
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppBaseError):
    """Raised when access is understood but not allowed (e.g. expired share link)."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppBaseError):
    """No matching, owner-scoped record in the required lifecycle stage."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppBaseError):
    """Uniqueness violation or a state that blocks the operation."""
    status_code = status.HTTP_409_CONFLICT


class InternalError(AppBaseError):
    """Unclassified failure. Never carries internal detail to the caller."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Something went wrong, please try again later"):
        super().__init__(message=message)


# ── Utility: convert to a JSON response ─────────────────

def app_error_to_response(error: AppBaseError) -> JSONResponse:
    """Convert an AppBaseError to a JSONResponse with a consistent body."""
    return JSONResponse(
        status_code=error.status_code,
        content={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application error handlers to a FastAPI app."""

    @app.exception_handler(AppBaseError)
    async def handle_app_error(request: Request, exc: AppBaseError):
        if isinstance(exc, InternalError):
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return app_error_to_response(exc)

    @app.exception_handler(APIError)
    async def handle_store_error(request: Request, exc: APIError):
        if exc.code == INVALID_TEXT_REPRESENTATION:
            return app_error_to_response(ValidationError("Invalid identifier"))
        logger.error(f"Store error on {request.method} {request.url.path}: {exc.message}", exc_info=True)
        return app_error_to_response(InternalError())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return app_error_to_response(InternalError())
