"""Typed outcomes of the issue and message stores.

The HTTP boundary (api/errors.py) maps each class to a status code. Only
ConflictError and unexpected exceptions are logged as problems; the rest
are ordinary answers to a request.
"""


class SupportError(Exception):
    """Base class for issue and message store outcomes."""


class InvalidInputError(SupportError):
    """Malformed or missing input: blank fields, unknown state, unknown company."""


class NotFoundError(SupportError):
    """No matching row."""


class IssueNotFoundError(NotFoundError):
    """
    Issue does not exist or is outside the principal's scope.

    Guarded lookups cannot tell the two apart and the message is the same
    for both, so callers learn nothing about issues they cannot see.
    """


class NoMessagesError(NotFoundError):
    """The issue is accessible but its thread is empty."""


class AccessDeniedError(SupportError):
    """
    Principal's role may not perform the operation at all.

    Surfaced to clients exactly like IssueNotFoundError.
    """


class ConflictError(SupportError):
    """A conditional write that was expected to touch one row touched none."""
