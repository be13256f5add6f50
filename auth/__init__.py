"""Identity context: principals, sessions and the cookie middleware."""

from auth.exceptions import AuthError, SessionExpiredError
from auth.types import Principal, Role, Session, STAFF_ROLES
from auth.config import AuthConfig
from auth.session import SessionManager
