"""Session resolution for the identity context.

A session is a Valkey key ``session:<token>`` holding the serialized
Principal and its timestamps, with a TTL equal to the session lifetime.
The payload is parsed here, once, into a typed Session.
"""

import logging
import secrets
from datetime import timedelta

from pydantic import ValidationError

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.types import Principal, Session
from auth.exceptions import SessionExpiredError
from utils.timezone import now_utc, parse_iso

logger = logging.getLogger(__name__)

_TIMESTAMP_FIELDS = ("created_at", "expires_at", "last_activity_at")


def _to_payload(session: Session) -> dict:
    payload = {"principal": session.principal.model_dump(mode="json")}
    for name in _TIMESTAMP_FIELDS:
        payload[name] = getattr(session, name).isoformat()
    return payload


def _from_payload(token: str, payload: dict) -> Session:
    """Raises KeyError, TypeError, ValueError or ValidationError on a bad payload."""
    return Session(
        token=token,
        principal=Principal.model_validate(payload["principal"]),
        **{name: parse_iso(payload[name]) for name in _TIMESTAMP_FIELDS},
    )


class SessionManager:
    """Issue, resolve and revoke principal-bearing sessions."""

    KEY_PREFIX = "session:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._lifetime = timedelta(hours=config.session_expiry_hours)
        self._sliding = config.session_extend_on_activity

    def _key_for(self, token: str) -> str:
        return self.KEY_PREFIX + token

    def _save(self, session: Session) -> None:
        self._valkey.put_json(
            self._key_for(session.token),
            _to_payload(session),
            ttl_seconds=int(self._lifetime.total_seconds()),
        )

    def _discard(self, token: str, reason: str) -> SessionExpiredError:
        self._valkey.remove(self._key_for(token))
        return SessionExpiredError(reason)

    def create_session(self, principal: Principal) -> Session:
        """Start a session for a principal the login flow has authenticated."""
        started = now_utc()
        session = Session(
            token=secrets.token_urlsafe(32),
            principal=principal,
            created_at=started,
            expires_at=started + self._lifetime,
            last_activity_at=started,
        )
        self._save(session)
        return session

    def validate_session(self, token: str) -> Session:
        """Resolve a token to its session, sliding the expiry if configured.

        Raises:
            SessionExpiredError: Token unknown or expired, or its payload
                (including the principal's role) does not parse
        """
        try:
            payload = self._valkey.fetch_json(self._key_for(token))
        except ValueError:
            logger.warning("Dropping session with unreadable payload")
            raise self._discard(token, "Session payload is corrupt")

        if payload is None:
            raise SessionExpiredError("Session not found or expired")

        try:
            session = _from_payload(token, payload)
        except (KeyError, TypeError, ValueError, ValidationError):
            logger.warning("Dropping session whose principal does not parse")
            raise self._discard(token, "Session payload is invalid")

        if session.expires_at < now_utc():
            raise self._discard(token, "Session expired")

        if self._sliding:
            session = self._touch(session)
        return session

    def _touch(self, session: Session) -> Session:
        seen = now_utc()
        touched = session.model_copy(update={
            "expires_at": seen + self._lifetime,
            "last_activity_at": seen,
        })
        self._save(touched)
        return touched

    def revoke_session(self, token: str) -> None:
        """End a session. Unknown tokens are ignored."""
        self._valkey.remove(self._key_for(token))
