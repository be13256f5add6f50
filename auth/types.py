"""Pydantic models for the identity context."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Roles a session can carry."""

    GUEST = "GUEST"  # Customer, identified by email
    SUPPORT = "SUPPORT"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"  # Platform operator, unscoped admin routes only


STAFF_ROLES = frozenset({Role.SUPPORT, Role.ADMIN})


class Principal(BaseModel):
    """
    The authenticated actor of a request.

    Built once per request by AuthMiddleware from the session payload and
    never re-parsed by handlers.
    """

    role: Role
    username: str = Field(..., min_length=1, description="Customer email for GUEST, login name for staff")
    company_id: int | None = None
    company_name: str | None = None

    model_config = {"frozen": True}


class Session(BaseModel):
    """An active session bound to a principal."""

    token: str = Field(..., description="Session token (opaque string)")
    principal: Principal
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime
