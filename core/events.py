"""
Domain events for the support desk.

Immutable event objects published after the write they describe has
committed. Events carry the full domain object so handlers never re-read
state that may not be visible to their connection yet.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class SupportEvent:
    """Base class for all support desk events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class IssueEvent(SupportEvent):
    """Events related to issue lifecycle."""
    pass


@dataclass(frozen=True)
class IssueCreated(IssueEvent):
    """A customer submitted a new issue.

    message is the text of the submission form; it is not stored as part of
    the thread, so this event is the only place it travels.
    """
    issue: Any = None  # core.models.Issue
    message: str = ""

    @classmethod
    def create(cls, issue: Any, message: str = "") -> "IssueCreated":
        return cls(issue=issue, message=message)
