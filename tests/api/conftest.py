"""Fixtures for HTTP route tests: the real app wired with mocked services."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from auth.config import AuthConfig
from auth.session import SessionManager
from auth.types import Session
from core.config import SupportConfig
from core.services.issue_service import IssueService
from core.services.message_service import MessageService
from main import AppComponents, create_app
from utils.timezone import now_utc


# =============================================================================
# SERVICE & SESSION MOCKS
# =============================================================================


@pytest.fixture
def issue_service():
    return Mock(spec=IssueService)


@pytest.fixture
def message_service():
    return Mock(spec=MessageService)


@pytest.fixture
def mock_session_manager():
    return Mock(spec=SessionManager)


@pytest.fixture
def login(mock_session_manager):
    """Make the session cookie resolve to the given principal."""
    def _login(principal):
        now = now_utc()
        mock_session_manager.validate_session.return_value = Session(
            token="test-token",
            principal=principal,
            created_at=now,
            expires_at=now + timedelta(hours=24),
            last_activity_at=now,
        )
        return principal
    return _login


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(issue_service, message_service, mock_session_manager):
    """App from create_app with prebuilt components; no Vault, no database."""
    components = AppComponents(
        config=SupportConfig(),
        auth_config=AuthConfig(),
        session_manager=mock_session_manager,
        issue_service=issue_service,
        message_service=message_service,
    )
    return create_app(components)


@pytest.fixture
def client(app):
    """Client carrying a session cookie; call login() to pick the principal."""
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session_token", "test-token")
    return c


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no session cookie)."""
    return TestClient(app, raise_server_exceptions=False)
