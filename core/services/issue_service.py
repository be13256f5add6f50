"""
Issue service: submission, lookups and state changes.

Every scoped read is a single guarded SELECT and every state change a
single conditional UPDATE, so an access check can never race the write it
protects.
"""

import logging
from uuid import UUID, uuid4

from auth.types import Principal
from clients.postgres_client import PostgresClient
from core.access import require_staff, scope_clause
from core.audit import AuditLogger, AuditAction, record_committed
from core.event_bus import EventBus
from core.events import IssueCreated
from core.exceptions import ConflictError, InvalidInputError, IssueNotFoundError
from core.models import Issue, IssueCreate, IssueState
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

_ISSUE_COLUMNS = "id, company_id, company_name, customer_email, title, subject, state, created, latest"


class IssueService:
    """Service for issue operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger, event_bus: EventBus):
        self.postgres = postgres
        self.audit = audit
        self.event_bus = event_bus

    def create(self, data: IssueCreate) -> Issue:
        """
        Create an issue from a public submission.

        The company name is copied from the companies row in the same
        statement, so company_id and company_name always agree. After the
        insert commits, IssueCreated is published; whatever its handlers do,
        the issue stays created.

        Args:
            data: Validated submission

        Returns:
            Created issue in NEW state, created == latest

        Raises:
            InvalidInputError: If the company does not exist
        """
        issue_id = uuid4()
        now = now_utc()

        rows = self.postgres.execute_returning(
            f"""
            INSERT INTO issues (
                id, company_id, company_name, customer_email,
                title, subject, state, created, latest
            )
            SELECT %s, c.id, c.name, %s, %s, %s, %s::issue_state, %s, %s
            FROM companies c
            WHERE c.id = %s
            RETURNING {_ISSUE_COLUMNS}
            """,
            (
                issue_id, data.email, data.title, data.subject,
                IssueState.initial(), now, now, data.company_id,
            ),
            max_rows=1,
        )
        if not rows:
            raise InvalidInputError(f"Company {data.company_id} does not exist")

        issue = Issue.model_validate(rows[0])

        record_committed(
            self.audit,
            entity_type="issue",
            entity_id=issue.id,
            action=AuditAction.CREATE,
            changes={"created": issue.model_dump(mode="json")},
            actor=issue.customer_email,
        )

        logger.info("Issue %s created for company %s", issue.id, issue.company_id)
        self.event_bus.publish(IssueCreated.create(issue=issue, message=data.message))
        return issue

    def get_by_id(self, issue_id: UUID) -> Issue | None:
        """
        Unscoped lookup for administrative flows.

        Returns:
            Issue if found, None otherwise.
        """
        row = self.postgres.execute_single(
            f"SELECT {_ISSUE_COLUMNS} FROM issues WHERE id = %s",
            (issue_id,)
        )
        if row is None:
            return None
        return Issue.model_validate(row)

    def get_for_principal(self, issue_id: UUID, principal: Principal) -> Issue:
        """
        Issue as seen by principal.

        Raises:
            IssueNotFoundError: If the issue is missing or out of scope (same message)
            AccessDeniedError: If principal's role has no scope
        """
        clause, value = scope_clause(principal)
        row = self.postgres.execute_single(
            f"SELECT {_ISSUE_COLUMNS} FROM issues WHERE id = %s AND {clause}",
            (issue_id, value)
        )
        if row is None:
            raise IssueNotFoundError(f"Issue {issue_id} not found")
        return Issue.model_validate(row)

    def list_all(self) -> list[Issue]:
        """Every issue, newest first. Administrative; empty is a valid result."""
        rows = self.postgres.execute(
            f"SELECT {_ISSUE_COLUMNS} FROM issues ORDER BY created DESC"
        )
        return [Issue.model_validate(row) for row in rows]

    def list_for_company(self, principal: Principal) -> list[Issue]:
        """
        Issues of the staff principal's company, newest first.

        Raises:
            AccessDeniedError: If principal is not company staff
            IssueNotFoundError: If the company has no issues
        """
        company_id = require_staff(principal)
        rows = self.postgres.execute(
            f"SELECT {_ISSUE_COLUMNS} FROM issues WHERE company_id = %s ORDER BY created DESC",
            (company_id,)
        )
        if not rows:
            raise IssueNotFoundError("No issues found")
        return [Issue.model_validate(row) for row in rows]

    def update_state(self, issue_id: UUID, principal: Principal, new_state: str | IssueState) -> Issue:
        """
        Move an issue of the principal's company to new_state.

        new_state is validated before anything touches the database. The
        update itself is one conditional statement matching both id and
        company, so "no such issue" and "not your company" both come back
        as zero rows.

        Returns:
            Updated issue

        Raises:
            AccessDeniedError: If principal is not company staff
            InvalidInputError: If new_state is not a known state
            ConflictError: If no row matched
            UnexpectedRowCountError: If more than one row matched (rolled back)
        """
        company_id = require_staff(principal)
        state = IssueState.parse(new_state)

        rows = self.postgres.execute_returning(
            f"""
            UPDATE issues
            SET state = %s::issue_state, latest = GREATEST(latest, %s)
            WHERE id = %s AND company_id = %s
            RETURNING {_ISSUE_COLUMNS}
            """,
            (state, now_utc(), issue_id, company_id),
            max_rows=1,
        )
        if not rows:
            logger.warning(
                "State update to %s matched no issue (issue_id=%s, company_id=%s, actor=%s)",
                state.value, issue_id, company_id, principal.username,
            )
            raise ConflictError(f"Issue {issue_id} state could not be updated")

        updated = Issue.model_validate(rows[0])

        record_committed(
            self.audit,
            entity_type="issue",
            entity_id=issue_id,
            action=AuditAction.UPDATE,
            changes={"state": {"new": updated.state.value}, "latest": {"new": updated.latest.isoformat()}},
            actor=principal.username,
        )

        return updated
