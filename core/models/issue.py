"""Issue (support ticket) domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator

from core.exceptions import InvalidInputError


class IssueState(str, Enum):
    """Issue lifecycle state. Values match the issue_state database enum."""

    NEW = "NEW"
    OPEN = "OPEN"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"

    @classmethod
    def initial(cls) -> "IssueState":
        return cls.NEW

    @classmethod
    def parse(cls, value: "str | IssueState") -> "IssueState":
        """
        Parse a client-supplied state.

        Raises:
            InvalidInputError: If value names no known state
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(state.value for state in cls)
            raise InvalidInputError(f"Unknown issue state '{value}'. Valid states: {valid}")


class IssueCreate(BaseModel):
    """
    Public issue submission.

    email must be a valid address but is kept exactly as typed: it becomes
    the issue's customer_email, which a GUEST principal's username must
    match verbatim.
    """

    email: str = Field(..., max_length=320)
    title: str = Field(..., min_length=1, max_length=255)
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field("", max_length=10000)
    company_id: int = Field(..., ge=1, description="Company whose support desk receives the issue")

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email address: {e}") from e
        return value


class IssueStateUpdate(BaseModel):
    """Requested state change. Kept as a string so unknown values reach IssueState.parse."""

    state: str = Field(..., min_length=1)


class Issue(BaseModel):
    """Full issue entity as stored."""

    id: UUID
    company_id: int
    company_name: str
    customer_email: str
    title: str
    subject: str
    state: IssueState
    created: datetime
    latest: datetime

    model_config = {"from_attributes": True}
