"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors raised by the auth flows. Route
handlers catch AppError at the boundary and pick the status code their
endpoint has always returned (see error_response); anything that escapes a
route is converted by the global handlers registered here.

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class UnauthorizedError(AppError):
    """Missing, malformed or expired session, or the account is gone."""

    status_code = 401
    error_code = "unauthorized"


class InvalidCredentialError(AppError):
    """Wrong password or OTP, or no account the credentials could apply to."""

    status_code = 401
    error_code = "invalid_credentials"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class ExpiredError(AppError):
    status_code = 410
    error_code = "expired"


class InvalidOrExpiredTokenError(AppError):
    status_code = 400
    error_code = "invalid_or_expired_token"


class MismatchError(AppError):
    status_code = 400
    error_code = "mismatch"


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


class DispatchError(AppError):
    """An email or voice provider failed to deliver a message."""

    status_code = 502
    error_code = "dispatch_failed"


class ConfigurationError(AppError):
    """Credentials for an external provider (OAuth, telephony, JWT) are missing."""

    status_code = 500
    error_code = "configuration_error"


def error_response(
    exc: AppError, status_code: Optional[int] = None, *, key: str = "error"
) -> JSONResponse:
    """Build the JSON error body for *exc*.

    Args:
        exc: The caught application error.
        status_code: Status to respond with; defaults to ``exc.status_code``.
        key: Body key carrying the message. ``/check`` answers with
            ``{"message": ...}`` instead of ``{"error": ...}``.
    """
    content = exc.to_dict()
    if key != "error":
        content[key] = content.pop("error")
    return JSONResponse(
        status_code=status_code or exc.status_code,
        content=content,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        message = first.get("msg", "Invalid request")
        error = ValidationError(
            message,
            field=".".join(loc) or None,
            details=[
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg")}
                for e in errors
            ],
        )
        return error_response(error)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
