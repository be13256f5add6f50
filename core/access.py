"""
Access control guard for issues.

One rule, two renderings: has_access() evaluates it against a loaded
issue, scope_clause() renders it as the SQL predicate appended to guarded
lookups. Both must stay in step.

- GUEST: the issue's customer_email equals the principal's username
- SUPPORT / ADMIN: the issue's company_id equals the principal's company_id
- anything else: denied
"""

from typing import Any

from auth.types import Principal, Role, STAFF_ROLES
from core.exceptions import AccessDeniedError
from core.models import Issue, Sender


def is_staff(principal: Principal) -> bool:
    return principal.role in STAFF_ROLES


def has_access(principal: Principal, issue: Issue) -> bool:
    """Whether principal may read and write messages on issue."""
    if principal.role == Role.GUEST:
        return issue.customer_email == principal.username
    if principal.role in STAFF_ROLES:
        return principal.company_id is not None and issue.company_id == principal.company_id
    return False


def scope_clause(principal: Principal) -> tuple[str, Any]:
    """
    SQL predicate and parameter restricting issues to the principal's scope.

    Raises:
        AccessDeniedError: For roles with no scope (fails closed before any query)
    """
    if principal.role == Role.GUEST:
        return "customer_email = %s", principal.username
    if principal.role in STAFF_ROLES:
        if principal.company_id is None:
            raise AccessDeniedError(f"Staff principal {principal.username} has no company")
        return "company_id = %s", principal.company_id
    raise AccessDeniedError(f"Role {principal.role} has no issue scope")


def require_staff(principal: Principal) -> int:
    """
    Company id of a staff principal.

    Raises:
        AccessDeniedError: If principal is not company staff
    """
    if not is_staff(principal) or principal.company_id is None:
        raise AccessDeniedError(f"{principal.username} is not company staff")
    return principal.company_id


def sender_for(principal: Principal) -> Sender:
    """Message sender category for the principal's role."""
    if principal.role == Role.GUEST:
        return Sender.CUSTOMER
    if principal.role in STAFF_ROLES:
        return Sender.SUPPORT
    raise AccessDeniedError(f"Role {principal.role} may not post messages")
