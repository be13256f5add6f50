"""FastAPI dependencies exposing the request principal."""

from collections.abc import Callable

from fastapi import Depends, Request

from auth.exceptions import AuthError
from auth.types import Principal, Role
from core.exceptions import AccessDeniedError


def get_principal(request: Request) -> Principal:
    """The Principal AuthMiddleware resolved for this request.

    Raises:
        AuthError: If the route was reached without a resolved session
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise AuthError("Authentication required")
    return principal


def role_required(*roles: Role) -> Callable[[Principal], Principal]:
    """Dependency factory ensuring the principal holds one of roles.

    A wrong role surfaces as AccessDeniedError, answered as not found.
    """
    allowed = frozenset(roles)

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed:
            raise AccessDeniedError(f"Role {principal.role.value} not in {sorted(r.value for r in allowed)}")
        return principal

    return dependency
