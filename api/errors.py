"""Global exception handlers for FastAPI.

This is the one place store outcomes become HTTP statuses. In particular
AccessDeniedError is answered exactly like a missing issue, so no route
can leak whether an issue it refuses to show exists.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from api.middleware import request_id_of
from auth.exceptions import AuthError
from core.exceptions import (
    AccessDeniedError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Issue not found"


def _json_error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
    )


def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    """Log exc with its traceback and answer without its details."""
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return _json_error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return _json_error(request, 401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return _json_error(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _json_error(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(ValidationError)
    async def model_error_handler(request: Request, exc: ValidationError):
        # Request bodies fail as RequestValidationError; this is data we produced
        return _internal_error(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return _json_error(request, 400, ErrorCodes.VALIDATION_ERROR, details)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _json_error(request, 404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(AccessDeniedError)
    async def access_denied_handler(request: Request, exc: AccessDeniedError):
        logger.debug("Access denied on %s %s: %s", request.method, request.url.path, exc)
        return _json_error(request, 404, ErrorCodes.NOT_FOUND, NOT_FOUND_MESSAGE)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _json_error(request, 409, ErrorCodes.CONFLICT, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        return _internal_error(request, exc)
