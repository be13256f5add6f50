"""Typed exceptions for session failures."""


class AuthError(Exception):
    """Base class for authentication errors."""


class SessionExpiredError(AuthError):
    """
    Session is unknown, expired, or its payload cannot be trusted.

    A payload naming an unknown role lands here too, so an unreadable
    identity always fails closed.
    """
