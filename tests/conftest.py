"""Shared test fixtures for the support desk test suite."""

import json
from pathlib import Path
from unittest.mock import Mock
from uuid import uuid4

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from clients.vault_client import reset_vault_cache

# Reset vault client singleton to pick up env vars
reset_vault_cache()

from auth.types import Principal, Role
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.audit import AuditLogger
from core.event_bus import EventBus
from core.models import Issue, Message
from utils.timezone import now_utc


# =============================================================================
# PRINCIPAL CONSTANTS
# =============================================================================

COMPANY_ID = 7
COMPANY_NAME = "Acme"
OTHER_COMPANY_ID = 9

CUSTOMER_EMAIL = "a@x.com"
OTHER_CUSTOMER_EMAIL = "b@x.com"


# =============================================================================
# PRINCIPAL FIXTURES
# =============================================================================


@pytest.fixture
def guest() -> Principal:
    """Customer who submitted issues as a@x.com."""
    return Principal(role=Role.GUEST, username=CUSTOMER_EMAIL)


@pytest.fixture
def other_guest() -> Principal:
    return Principal(role=Role.GUEST, username=OTHER_CUSTOMER_EMAIL)


@pytest.fixture
def support_agent() -> Principal:
    """SUPPORT staff of company 7."""
    return Principal(role=Role.SUPPORT, username="sam", company_id=COMPANY_ID, company_name=COMPANY_NAME)


@pytest.fixture
def company_admin() -> Principal:
    """ADMIN staff of company 7."""
    return Principal(role=Role.ADMIN, username="ada", company_id=COMPANY_ID, company_name=COMPANY_NAME)


@pytest.fixture
def other_company_agent() -> Principal:
    """SUPPORT staff of company 9."""
    return Principal(role=Role.SUPPORT, username="olga", company_id=OTHER_COMPANY_ID, company_name="Globex")


@pytest.fixture
def super_admin() -> Principal:
    return Principal(role=Role.SUPER_ADMIN, username="root")


# =============================================================================
# ROW FACTORIES
# =============================================================================


def make_issue_row(**overrides) -> dict:
    """Issue row as PostgresClient returns it (RealDictCursor dict)."""
    now = now_utc()
    row = {
        "id": uuid4(),
        "company_id": COMPANY_ID,
        "company_name": COMPANY_NAME,
        "customer_email": CUSTOMER_EMAIL,
        "title": "Login broken",
        "subject": "Login",
        "state": "NEW",
        "created": now,
        "latest": now,
    }
    row.update(overrides)
    return row


def make_message_row(issue_id, **overrides) -> dict:
    row = {
        "id": 1,
        "issue_id": issue_id,
        "body": "Can't log in",
        "sender": "CUSTOMER",
        "username": CUSTOMER_EMAIL,
        "created_at": now_utc(),
    }
    row.update(overrides)
    return row


@pytest.fixture
def issue_row_factory():
    """make_issue_row, for tests that need several rows."""
    return make_issue_row


@pytest.fixture
def message_row_factory():
    return make_message_row


@pytest.fixture
def issue_row() -> dict:
    return make_issue_row()


@pytest.fixture
def issue(issue_row) -> Issue:
    return Issue.model_validate(issue_row)


@pytest.fixture
def message(issue) -> Message:
    return Message.model_validate(make_message_row(issue.id))


# =============================================================================
# INFRASTRUCTURE MOCKS
# =============================================================================


@pytest.fixture
def mock_db():
    """PostgresClient stand-in; tests set return values per call."""
    return Mock(spec=PostgresClient)


@pytest.fixture
def mock_audit():
    return Mock(spec=AuditLogger)


@pytest.fixture
def event_bus():
    """Inline (synchronous) bus."""
    return EventBus()


@pytest.fixture
def fake_valkey():
    """ValkeyClient stand-in backed by a dict; TTLs are recorded, not enforced."""
    store: dict[str, str] = {}
    ttls: dict[str, int] = {}
    mock = Mock(spec=ValkeyClient)

    def _put_json(key, value, ttl_seconds):
        store[key] = json.dumps(value)
        ttls[key] = ttl_seconds

    def _fetch_json(key):
        raw = store.get(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Value under '{key}' is not JSON: {e}") from e
        if not isinstance(value, dict):
            raise ValueError(f"Value under '{key}' is not a JSON object")
        return value

    mock.put_json.side_effect = _put_json
    mock.fetch_json.side_effect = _fetch_json
    mock.remove.side_effect = lambda key: store.pop(key, None) is not None
    mock.store = store
    mock.ttls = ttls
    return mock
