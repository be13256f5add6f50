"""Message (issue thread entry) domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class Sender(str, Enum):
    """Who wrote a message. Derived from the author's role, never client-supplied."""

    CUSTOMER = "CUSTOMER"
    SUPPORT = "SUPPORT"


class MessageCreate(BaseModel):
    """Data required to post a message. Any extra field (e.g. sender) is ignored."""

    body: str = Field(..., min_length=1, max_length=10000)

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}


class Message(BaseModel):
    """Full message entity as stored."""

    id: int
    issue_id: UUID
    body: str
    sender: Sender
    username: str
    created_at: datetime

    model_config = {"from_attributes": True}
