"""
Message service for issue threads.

Both operations start with the same guarded lookup the issue service uses:
a principal who cannot see an issue cannot read or extend its thread. A
refused read is "not found" and a refused post a conflict; neither tells a
missing issue apart from a forbidden one.
"""

import logging
from uuid import UUID

from auth.types import Principal
from clients.postgres_client import PostgresClient
from core.access import scope_clause, sender_for
from core.audit import AuditLogger, AuditAction, record_committed
from core.exceptions import ConflictError, IssueNotFoundError, NoMessagesError
from core.models import Message, MessageCreate

logger = logging.getLogger(__name__)

_MESSAGE_COLUMNS = "id, issue_id, body, sender, username, created_at"


class MessageService:
    """Service for issue thread operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def _can_see(self, issue_id: UUID, principal: Principal) -> bool:
        clause, value = scope_clause(principal)
        found = self.postgres.execute_scalar(
            f"SELECT 1 FROM issues WHERE id = %s AND {clause}",
            (issue_id, value)
        )
        return found is not None

    def list_for_issue(self, issue_id: UUID, principal: Principal) -> list[Message]:
        """
        Thread of an issue, oldest first.

        Raises:
            IssueNotFoundError: If the issue is missing or out of scope
            NoMessagesError: If the thread is empty
        """
        if not self._can_see(issue_id, principal):
            raise IssueNotFoundError(f"Issue {issue_id} not found")

        rows = self.postgres.execute(
            f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM messages
            WHERE issue_id = %s
            ORDER BY created_at ASC, id ASC
            """,
            (issue_id,)
        )
        if not rows:
            raise NoMessagesError("No messages found")
        return [Message.model_validate(row) for row in rows]

    def post(self, issue_id: UUID, principal: Principal, data: MessageCreate) -> Message:
        """
        Append a message to an issue thread.

        The sender category comes from the principal's role; the timestamp
        from the database.

        Returns:
            Created message

        Raises:
            ConflictError: If the issue is missing or out of scope, or the
                insert produced no row
        """
        if not self._can_see(issue_id, principal):
            logger.info(
                "Message refused: issue %s missing or out of scope for %s",
                issue_id, principal.username,
            )
            raise ConflictError(f"Message could not be added to issue {issue_id}")
        sender = sender_for(principal)

        rows = self.postgres.execute_returning(
            f"""
            INSERT INTO messages (issue_id, body, sender, username, created_at)
            SELECT %s, %s, %s::sender, %s, now()
            WHERE EXISTS (SELECT 1 FROM issues WHERE id = %s)
            RETURNING {_MESSAGE_COLUMNS}
            """,
            (issue_id, data.body, sender, principal.username, issue_id),
            max_rows=1,
        )
        if not rows:
            logger.error(
                "Message insert returned no row after access check passed (issue_id=%s, actor=%s)",
                issue_id, principal.username,
            )
            raise ConflictError(f"Message could not be added to issue {issue_id}")

        message = Message.model_validate(rows[0])

        record_committed(
            self.audit,
            entity_type="message",
            entity_id=message.id,
            action=AuditAction.CREATE,
            changes={"created": message.model_dump(mode="json")},
            actor=principal.username,
        )

        return message
