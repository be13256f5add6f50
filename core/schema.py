"""Database schema for the support desk.

ensure_schema() is idempotent and runs at application start-up.
"""

import logging

from clients.postgres_client import PostgresClient

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
DO $$ BEGIN
    CREATE TYPE issue_state AS ENUM ('NEW', 'OPEN', 'PENDING', 'RESOLVED', 'CLOSED');
EXCEPTION WHEN duplicate_object THEN NULL;
END $$;

DO $$ BEGIN
    CREATE TYPE sender AS ENUM ('CUSTOMER', 'SUPPORT');
EXCEPTION WHEN duplicate_object THEN NULL;
END $$;

CREATE TABLE IF NOT EXISTS companies (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE CHECK (name <> '')
);

CREATE TABLE IF NOT EXISTS issues (
    id UUID PRIMARY KEY,
    company_id INTEGER NOT NULL REFERENCES companies(id),
    company_name TEXT NOT NULL,
    customer_email TEXT NOT NULL CHECK (customer_email <> ''),
    title TEXT NOT NULL CHECK (title <> ''),
    subject TEXT NOT NULL CHECK (subject <> ''),
    state issue_state NOT NULL DEFAULT 'NEW',
    created TIMESTAMPTZ NOT NULL,
    latest TIMESTAMPTZ NOT NULL,
    CHECK (created <= latest)
);

CREATE INDEX IF NOT EXISTS issues_company_created_idx ON issues (company_id, created DESC);
CREATE INDEX IF NOT EXISTS issues_customer_email_idx ON issues (customer_email);

CREATE TABLE IF NOT EXISTS messages (
    id BIGSERIAL PRIMARY KEY,
    issue_id UUID NOT NULL REFERENCES issues(id),
    body TEXT NOT NULL CHECK (body <> ''),
    sender sender NOT NULL,
    username TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS messages_issue_thread_idx ON messages (issue_id, created_at, id);

CREATE TABLE IF NOT EXISTS audit_log (
    id UUID PRIMARY KEY,
    actor TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    action TEXT NOT NULL,
    changes JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


def ensure_schema(postgres: PostgresClient) -> None:
    """Create enum types, tables and indexes that do not exist yet."""
    postgres.execute_script(SCHEMA_SQL)
    logger.info("Database schema ensured")
