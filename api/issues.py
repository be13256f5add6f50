"""
HTTP routes for issues and their message threads.

Endpoints are plain functions so FastAPI runs each one on its worker
thread pool; the services underneath do blocking database work. Every
scoped route passes the request's Principal to the service, which decides
what the principal may see.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.base import success_response
from api.dependencies import get_principal, role_required
from api.middleware import request_id_of
from auth.types import Principal, Role
from core.exceptions import IssueNotFoundError
from core.models import IssueCreate, IssueStateUpdate, MessageCreate
from core.services.issue_service import IssueService
from core.services.message_service import MessageService


def create_issues_router(issue_service: IssueService, message_service: MessageService) -> APIRouter:
    """Create the /api/issues router with injected services."""
    router = APIRouter(prefix="/issues", tags=["issues"])

    @router.post("", status_code=201)
    def create_issue(request: Request, body: IssueCreate):
        """Public submission; answers 201 even if the receipt email fails."""
        issue = issue_service.create(body)
        return success_response(issue.model_dump(mode="json"), request_id_of(request))

    @router.get("")
    def list_company_issues(request: Request, principal: Principal = Depends(get_principal)):
        issues = issue_service.list_for_company(principal)
        return success_response(
            [issue.model_dump(mode="json") for issue in issues],
            request_id_of(request),
        )

    @router.get("/{issue_id}")
    def get_issue(request: Request, issue_id: UUID, principal: Principal = Depends(get_principal)):
        issue = issue_service.get_for_principal(issue_id, principal)
        return success_response(issue.model_dump(mode="json"), request_id_of(request))

    @router.put("/{issue_id}/state")
    def update_issue_state(
        request: Request,
        issue_id: UUID,
        body: IssueStateUpdate,
        principal: Principal = Depends(get_principal),
    ):
        issue = issue_service.update_state(issue_id, principal, body.state)
        return success_response(issue.model_dump(mode="json"), request_id_of(request))

    @router.get("/{issue_id}/messages")
    def list_messages(request: Request, issue_id: UUID, principal: Principal = Depends(get_principal)):
        """Thread in posting order. An empty thread is reported as not found."""
        messages = message_service.list_for_issue(issue_id, principal)
        return success_response(
            [message.model_dump(mode="json") for message in messages],
            request_id_of(request),
        )

    @router.post("/{issue_id}/messages", status_code=201)
    def post_message(
        request: Request,
        issue_id: UUID,
        body: MessageCreate,
        principal: Principal = Depends(get_principal),
    ):
        """Append a message. The sender comes from the principal's role, never the body."""
        message = message_service.post(issue_id, principal, body)
        return success_response(message.model_dump(mode="json"), request_id_of(request))

    return router


def create_admin_router(issue_service: IssueService) -> APIRouter:
    """Create the unscoped /api/admin router, restricted to SUPER_ADMIN."""
    router = APIRouter(
        prefix="/admin",
        tags=["admin"],
        dependencies=[Depends(role_required(Role.SUPER_ADMIN))],
    )

    @router.get("/issues")
    def list_all_issues(request: Request):
        issues = issue_service.list_all()
        return success_response(
            [issue.model_dump(mode="json") for issue in issues],
            request_id_of(request),
        )

    @router.get("/issues/{issue_id}")
    def get_any_issue(request: Request, issue_id: UUID):
        issue = issue_service.get_by_id(issue_id)
        if issue is None:
            raise IssueNotFoundError(f"Issue {issue_id} not found")
        return success_response(issue.model_dump(mode="json"), request_id_of(request))

    return router
