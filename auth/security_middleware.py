"""Session cookie authentication for every non-public route."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.config import AuthConfig
from auth.session import SessionManager
from auth.exceptions import SessionExpiredError
from api.base import error_response, ErrorCodes
from api.middleware import request_id_of
from utils.principal_context import principal_context

logger = logging.getLogger(__name__)

# Reachable without a session on any method
OPEN_PREFIXES = ("/health", "/docs", "/openapi.json")

# Reachable without a session only on the given method
OPEN_ENDPOINTS = frozenset({
    ("POST", "/api/issues"),
    ("POST", "/auth/logout"),
})


def is_public(method: str, path: str) -> bool:
    normalized = path.rstrip("/") or "/"
    return (method, normalized) in OPEN_ENDPOINTS or path.startswith(OPEN_PREFIXES)


def _reject(request: Request, code: str, message: str) -> JSONResponse:
    body = error_response(code, message, request_id_of(request))
    return JSONResponse(status_code=401, content=body.model_dump(mode="json"))


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Resolve the session cookie to a Principal before the route runs.

    The principal is placed on ``request.state.principal`` (with the full
    Session on ``request.state.session``) and in the principal context for
    the duration of the request. A missing cookie answers 401
    NOT_AUTHENTICATED; an unknown, expired or unreadable session answers
    401 SESSION_EXPIRED.
    """

    def __init__(self, app, session_manager: SessionManager, config: AuthConfig | None = None):
        super().__init__(app)
        self._sessions = session_manager
        self._cookie_name = (config or AuthConfig()).session_cookie_name

    async def dispatch(self, request: Request, call_next):
        if is_public(request.method, request.url.path):
            return await call_next(request)

        token = request.cookies.get(self._cookie_name)
        if not token:
            return _reject(request, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            session = self._sessions.validate_session(token)
        except SessionExpiredError as e:
            logger.debug("Rejected session on %s %s: %s", request.method, request.url.path, e)
            return _reject(request, ErrorCodes.SESSION_EXPIRED, "Session has expired")

        request.state.principal = session.principal
        request.state.session = session
        with principal_context(session.principal):
            return await call_next(request)
