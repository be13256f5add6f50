"""
Audit trail for issue and message writes.

Rows in audit_log are only ever inserted. Each one names the actor (the
principal's username, or the submitting email for a public issue), the
entity it concerns and a JSON description of the change.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from psycopg2.extras import Json
from pydantic import BaseModel

from clients.postgres_client import PostgresClient
from utils.principal_context import get_current_principal

logger = logging.getLogger(__name__)

ANONYMOUS_ACTOR = "anonymous"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class AuditEntry(BaseModel):
    """One row of audit_log."""

    id: UUID
    actor: str
    entity_type: str
    entity_id: str
    action: AuditAction
    changes: dict[str, Any]
    created_at: datetime


class AuditLogger:
    """
    Usage:
        audit = AuditLogger(postgres)
        audit.record(
            entity_type="issue",
            entity_id=issue.id,
            action=AuditAction.UPDATE,
            changes={"state": {"new": "OPEN"}},
        )
        entries = audit.history("issue", issue.id)

    changes must already be JSON-safe, i.e. model_dump(mode="json") output.
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def record(
        self,
        entity_type: str,
        entity_id: UUID | int,
        action: AuditAction,
        changes: dict[str, Any],
        actor: str | None = None,
    ) -> None:
        """Append one entry; actor defaults to the principal of the current request."""
        if actor is None:
            principal = get_current_principal()
            actor = ANONYMOUS_ACTOR if principal is None else principal.username

        self.postgres.execute(
            "INSERT INTO audit_log (id, actor, entity_type, entity_id, action, changes, created_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, now())",
            (uuid4(), actor, entity_type, str(entity_id), action.value, Json(changes)),
        )

    def history(self, entity_type: str, entity_id: UUID | int) -> list[AuditEntry]:
        """Entries for one entity, newest first."""
        rows = self.postgres.execute(
            "SELECT id, actor, entity_type, entity_id, action, changes, created_at "
            "FROM audit_log WHERE entity_type = %s AND entity_id = %s "
            "ORDER BY created_at DESC, id",
            (entity_type, str(entity_id)),
        )
        return [AuditEntry.model_validate(row) for row in rows]


def record_committed(audit: AuditLogger, **entry) -> None:
    """
    Audit a write that has already committed.

    The write stands whatever happens here, so a failed audit insert is
    logged rather than raised to a caller who would otherwise retry it.
    """
    try:
        audit.record(**entry)
    except Exception:
        logger.exception(
            "Audit entry lost for committed %s %s (%s)",
            entry.get("entity_type"), entry.get("entity_id"), entry.get("action"),
        )
