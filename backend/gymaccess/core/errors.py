"""API error kinds and exception handlers.

Every failure a client can see belongs to one ``ErrorKind``. Routes and
services raise ``ApiError`` (or one of the helpers below); the handlers
registered by ``register_exception_handlers`` render the same envelope for
all of them:

    {"error": "<message>", "kind": "<kind>"}

Request validation failures additionally carry an ``errors`` list.
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Closed set of error categories exposed by the API."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


# Conflicts stay at 400 for compatibility with existing clients
DEFAULT_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(HTTPException):
    """HTTPException tagged with an ErrorKind."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status_code or DEFAULT_STATUS[kind],
            detail=message,
            headers=headers,
        )
        self.kind = kind
        self.message = message


def not_found(entity: str) -> ApiError:
    return ApiError(ErrorKind.NOT_FOUND, f"{entity} not found")


def conflict(message: str) -> ApiError:
    return ApiError(ErrorKind.CONFLICT, message)


def bad_request(message: str) -> ApiError:
    return ApiError(ErrorKind.VALIDATION, message)


def forbidden(message: str = "Access denied") -> ApiError:
    return ApiError(ErrorKind.FORBIDDEN, message)


def _error_body(kind: ErrorKind, message: str, **extra: Any) -> dict:
    body = {"error": message, "kind": kind.value}
    body.update(extra)
    return body


def _format_validation_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors into {field, message, type} entries."""
    detail_list = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", [])]
        # Drop the "body"/"query" source prefix
        field = ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else None)
        detail_list.append({
            "field": field,
            "message": err.get("msg"),
            "type": err.get("type"),
        })
    return detail_list


_STATUS_KIND = {
    status.HTTP_400_BAD_REQUEST: ErrorKind.VALIDATION,
    status.HTTP_401_UNAUTHORIZED: ErrorKind.AUTHENTICATION,
    status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorKind.VALIDATION,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorKind.RATE_LIMITED,
}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.kind, exc.message),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework-raised HTTPExceptions (404 routes, 405) in the same envelope."""
    kind = _STATUS_KIND.get(exc.status_code, ErrorKind.INTERNAL)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(kind, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            ErrorKind.VALIDATION,
            "Validation failed",
            errors=_format_validation_errors(exc),
        ),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(ErrorKind.RATE_LIMITED, f"Rate limit exceeded: {exc.detail}"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(ErrorKind.INTERNAL, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Handlers resolve on the exception MRO, so ApiError wins over the generic one
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
