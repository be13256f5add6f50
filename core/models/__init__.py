"""Core domain models."""

from core.models.issue import Issue, IssueCreate, IssueStateUpdate, IssueState
from core.models.message import Message, MessageCreate, Sender

__all__ = [
    # Issue
    "Issue", "IssueCreate", "IssueStateUpdate", "IssueState",
    # Message
    "Message", "MessageCreate", "Sender",
]
