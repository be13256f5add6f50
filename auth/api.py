"""HTTP routes for the session-bound identity."""

from fastapi import APIRouter, Request, Response

from auth.config import AuthConfig
from auth.session import SessionManager
from api.base import success_response
from api.dependencies import get_principal
from api.middleware import request_id_of


def create_auth_router(session_manager: SessionManager, config: AuthConfig | None = None) -> APIRouter:
    """Create auth router with injected session manager."""
    router = APIRouter(tags=["auth"])
    cookie_name = (config or AuthConfig()).session_cookie_name

    @router.post("/logout")
    def logout(request: Request, response: Response):
        """Logout - revoke session and clear cookie."""
        session_token = request.cookies.get(cookie_name)

        if session_token:
            session_manager.revoke_session(session_token)

        response.delete_cookie(key=cookie_name)

        return success_response({"message": "Logged out successfully"}, request_id_of(request))

    @router.get("/me")
    def get_current_principal(request: Request):
        """Get the principal bound to the current session."""
        principal = get_principal(request)
        return success_response(principal.model_dump(mode="json"), request_id_of(request))

    return router
