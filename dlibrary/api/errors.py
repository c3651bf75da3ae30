"""
Centralized exception handlers for the FastAPI application.

Every error leaves the API as ``{"message": "..."}``. Domain exceptions
carry client-safe messages; anything unexpected (including store failures)
becomes a 500 without internal detail.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dlibrary.domain.exceptions import (
    AccountError,
    AccountNotFound,
    AlreadyVerified,
    AuthenticationDenied,
    DenialReason,
    EmailAlreadyRegistered,
    InvalidInput,
    VerificationInvalid,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


def status_for_exception(exc: AccountError) -> int:
    """Map a domain exception to its HTTP status."""
    if isinstance(exc, AuthenticationDenied):
        if exc.reason in (DenialReason.INVALID_CREDENTIALS, DenialReason.EMAIL_NOT_VERIFIED):
            return status.HTTP_401_UNAUTHORIZED
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, AccountNotFound | VerificationInvalid):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, InvalidInput | AlreadyVerified | EmailAlreadyRegistered):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def validation_message(exc: RequestValidationError) -> str:
    """Describe the first validation error, naming the offending field."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if not location:
        return "Missing request body" if first.get("type") == "missing" else "Invalid request body"

    field = location[-1]
    if first.get("type") == "missing":
        return f"Missing `{field}` field"
    return f"Invalid `{field}` field: {first.get('msg', 'invalid value')}"


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application."""

    @app.exception_handler(AccountError)
    async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
        status_code = status_for_exception(exc)
        logger.warning(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
        if status_code >= 500:
            return _error_response(status_code, SERVER_ERROR_MESSAGE)
        return _error_response(status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = validation_message(exc)
        logger.info("Validation error on %s %s: %s", request.method, request.url.path, message)
        return _error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)
