# school_api/core/errors.py
"""
Typed business errors and their translation into the response envelope.

Services raise these at the point a rule is violated; the handlers registered
by ``register_exception_handlers`` turn them into
``{"success": false, "message": ..., "data": null}`` with the matching status.
Outside production the formatted traceback is attached as ``stack``.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_api.core.config import settings

logger = logging.getLogger(__name__)


# --- Error Taxonomy ---
class APIError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(APIError):
    """Malformed, missing or out-of-range input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class UnauthenticatedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class ForbiddenError(APIError):
    """Authenticated, but not permitted for this tenant or role."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(APIError):
    """Uniqueness violation. Reported as 400, not 409."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Duplicate value"


class RateLimitExceededError(APIError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests from this IP, please try again later"


class InternalError(APIError):
    pass


# --- Envelope Helpers ---
def error_body(message: str, exc: Optional[BaseException] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message, "data": None}
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", []) if part not in ("body", "query")]
        if loc and loc[0] == "path":
            messages.append("Invalid ID format")
            continue
        field = ".".join(loc)
        msg = error.get("msg", "Invalid value")
        # pydantic prefixes custom ValueError messages
        if msg.startswith("Value error, "):
            messages.append(msg[len("Value error, "):])
        elif field:
            messages.append(f"{field}: {msg}")
        else:
            messages.append(msg)
    # Keep first occurrence order, drop repeats
    return ", ".join(dict.fromkeys(messages)) or "Validation failed"


# --- Handlers ---
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.info(f"{request.method} {request.url.path} -> 400: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))


async def duplicate_key_error_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    logger.warning(f"Unhandled duplicate key on {request.method} {request.url.path}: {exc.details}")
    return JSONResponse(
        status_code=ConflictError.status_code,
        content=error_body("Duplicate field value entered", exc),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Not found - {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    message = "Internal server error" if settings.is_production else str(exc) or "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(message, exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
