"""
Response envelope shared by every endpoint.

    {"success": true,  "data": {...}, "error": null, "meta": {...}}
    {"success": false, "data": null, "error": {"code", "message"}, "meta": {...}}

meta carries the response time in UTC and the request id that is also
sent back in the X-Request-ID header.
"""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel

from utils.timezone import now_utc


class ErrorCodes:
    """Values of ``error.code``."""

    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    # Out-of-scope issues are reported as NOT_FOUND too
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class APIError(BaseModel):
    code: str
    message: str


class APIMeta(BaseModel):
    timestamp: datetime
    request_id: str


class APIResponse(BaseModel):
    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta

    @classmethod
    def build(cls, request_id: str | None, **fields) -> "APIResponse":
        meta = APIMeta(timestamp=now_utc(), request_id=request_id or str(uuid4()))
        return cls(meta=meta, **fields)


def success_response(data: Any, request_id: str | None = None) -> APIResponse:
    return APIResponse.build(request_id, success=True, data=data)


def error_response(code: str, message: str, request_id: str | None = None) -> APIResponse:
    """Failure envelope; request_id is generated when the caller has none."""
    return APIResponse.build(request_id, success=False, error=APIError(code=code, message=message))
