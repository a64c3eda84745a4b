"""
Error handling

One failure taxonomy for every endpoint. Exceptions are mapped to a status
code by a single table and rendered as the standard response envelope:

    NotFoundError                               -> 404
    BadRequestError / request validation errors -> 400
    HTTPException                               -> its own status
    anything else                               -> 500

Unexpected errors are logged in full server-side. In production the client
only gets a sanitized message with an error ID for correlation.
"""

import logging
import os
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.shared.envelope import HttpResponse, describe_status

logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


class AppError(Exception):
    """Base class for errors with a known client-facing status."""


class NotFoundError(AppError):
    """The requested resource does not exist."""


class BadRequestError(AppError):
    """The request was understood but its content is invalid."""


STATUS_BY_EXCEPTION: list[tuple[type[Exception], int]] = [
    (NotFoundError, 404),
    (BadRequestError, 400),
    (RequestValidationError, 400),
    (ValidationError, 400),
]


def status_for(error: Exception) -> int:
    if isinstance(error, StarletteHTTPException):
        return error.status_code
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(error, exc_type):
            return status_code
    return 500


def describe_error(error: Exception) -> str:
    """Human readable error text, flattening pydantic error lists."""
    if isinstance(error, (RequestValidationError, ValidationError)):
        parts = []
        for err in error.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            parts.append(f"{location}: {err['msg']}" if location else err["msg"])
        return "; ".join(parts)
    if isinstance(error, StarletteHTTPException):
        return str(error.detail)
    return str(error)


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Failed to create blog")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context}. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def build_error_response(
    request: Request,
    error: Exception,
    failure_messages: dict[str, str],
) -> JSONResponse:
    """
    Render an exception as an envelope.

    The envelope message is the failure message registered for the endpoint
    that was handling the request, or the reason phrase when there is none
    (unknown route, wrong method).
    """
    status_code = status_for(error)
    _, message = describe_status(status_code)
    if not isinstance(error, StarletteHTTPException):
        endpoint = request.scope.get("endpoint")
        message = failure_messages.get(getattr(endpoint, "__name__", ""), message)

    if status_code >= 500:
        if ENVIRONMENT == "production":
            developer_message, _ = log_and_sanitize_error(error, message)
        else:
            logger.error(f"{message}: {type(error).__name__}: {error}", exc_info=error)
            developer_message = str(error)
    else:
        developer_message = describe_error(error)
        logger.warning(f"{request.method} {request.url.path} -> {status_code}: {developer_message}")

    return HttpResponse.build(status_code, message, developer_message).to_response()


def setup_error_handlers(app: FastAPI, failure_messages: Optional[dict[str, str]] = None) -> None:
    """
    Register envelope-producing handlers for every failure class on the app.

    failure_messages maps endpoint function names to the envelope message used
    when that endpoint fails, e.g. {"create_blog": "Failed to create blog"}.

    Call this before setup_cors(app): unexpected errors are turned into
    envelopes by a middleware that has to sit inside the CORS middleware, so
    500 responses still carry the CORS headers.
    """
    messages = dict(failure_messages or {})

    async def handle_error(request: Request, exc: Exception) -> JSONResponse:
        return build_error_response(request, exc, messages)

    for exc_type in (StarletteHTTPException, RequestValidationError, ValidationError, AppError):
        app.add_exception_handler(exc_type, handle_error)

    @app.middleware("http")
    async def handle_unexpected_errors(request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return build_error_response(request, exc, messages)
