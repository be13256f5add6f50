"""The acting principal of the current request, carried in a ContextVar.

AuthMiddleware binds it with principal_context() for the lifetime of a
request; the audit trail reads it to name the actor. Sync endpoints see it
because FastAPI runs them in a copy of the request's context.
"""

from contextlib import contextmanager
from contextvars import ContextVar

from auth.types import Principal

_current_principal: ContextVar[Principal | None] = ContextVar("current_principal", default=None)


def get_current_principal() -> Principal | None:
    """None on public routes and outside requests."""
    return _current_principal.get()


@contextmanager
def principal_context(principal: Principal):
    """
    Act as ``principal`` inside the block, then restore whatever was bound.

    Example:
        with principal_context(staff):
            audit.record("issue", issue_id, AuditAction.UPDATE, changes)
    """
    token = _current_principal.set(principal)
    try:
        yield principal
    finally:
        _current_principal.reset(token)
