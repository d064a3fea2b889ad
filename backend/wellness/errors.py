"""Error taxonomy and the FastAPI handlers that render it as JSON.

Every error carries an HTTP status and a client-safe message. Routes and
services raise these; the handlers registered by
:func:`register_exception_handlers` turn them into responses of the form::

    {"message": "...", "errors": [{"field": "...", "message": "..."}]}

where ``errors`` is only present for validation failures.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wellness.config import Settings
from wellness.validation import FieldError, ValidationResult

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Something went wrong!"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(AppError):
    """Malformed or missing input fields."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self, errors: list[FieldError], message: str | None = None
    ) -> None:
        self.errors = list(errors)
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [e.model_dump() for e in self.errors],
        }


class AuthError(AppError):
    """Missing, invalid or expired token, or wrong credentials."""

    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Session not found"


class ConflictError(AppError):
    status_code = 400
    default_message = "User already exists"


class ServerError(AppError):
    status_code = 500


def raise_for_result(result: ValidationResult) -> Any:
    """Raise :class:`ValidationError` for a failed result, else return its value."""
    if not result.ok:
        raise ValidationError(result.errors)
    return result.value


def _field_from_loc(loc: tuple[Any, ...]) -> str:
    # ("body", "tags", 0) -> "tags.0"; the leading location kind is dropped
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Attach JSON handlers for the error taxonomy to ``app``."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            FieldError(
                field=_field_from_loc(tuple(err.get("loc", ()))),
                message=err.get("msg", "Invalid value"),
            )
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=ValidationError.status_code,
            content=ValidationError(errors).to_dict(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Route not found"
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path
        )
        content: dict[str, Any] = {"message": ServerError.default_message}
        if settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)
