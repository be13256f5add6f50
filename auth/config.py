"""Session settings."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    How sessions are resolved here. Sessions are issued by the login flow
    in front of this service; this side only validates and revokes them.
    """

    session_expiry_hours: int = Field(default=480, ge=1, le=2160)
    # Each validated request pushes expires_at forward by the full lifetime
    session_extend_on_activity: bool = True
    session_cookie_name: str = "session_token"
