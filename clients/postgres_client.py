"""
PostgreSQL access for the support desk.

One PostgresClient is built at startup and shared by every service. It owns
a psycopg2 ThreadedConnectionPool, since FastAPI runs sync endpoints on a
thread pool, and hands rows back as plain dicts. Each call is its own
transaction.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple
from uuid import UUID

import psycopg2
import psycopg2.extensions
import psycopg2.extras
import psycopg2.pool

logger = logging.getLogger(__name__)

Params = Tuple | Dict | None


class UnexpectedRowCountError(RuntimeError):
    """A write touched more rows than its WHERE clause can legitimately match.

    The transaction is rolled back before this is raised.
    """

    def __init__(self, max_rows: int, actual: int):
        self.max_rows = max_rows
        self.actual = actual
        super().__init__(f"Statement affected {actual} rows, at most {max_rows} allowed")


def adapt_value(value: Any) -> Any:
    """UUIDs become strings and enums their values, recursively."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: adapt_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(adapt_value(item) for item in value)
    return value


class PostgresClient:
    """
    Usage:
        db = PostgresClient(database_url)
        rows = db.execute("SELECT * FROM issues WHERE company_id = %s", (7,))
        db.close()
    """

    def __init__(self, database_url: str, min_connections: int = 2, max_connections: int = 20):
        self._pool = psycopg2.pool.ThreadedConnectionPool(
            min_connections,
            max_connections,
            dsn=database_url,
            connect_timeout=30,
        )
        psycopg2.extras.register_default_jsonb(globally=True)
        logger.info("PostgreSQL pool ready (%d-%d connections)", min_connections, max_connections)

    @contextmanager
    def connection(self) -> Iterator[psycopg2.extensions.connection]:
        """A pooled connection, rolled back if left mid-transaction and always returned."""
        if self._pool is None:
            raise RuntimeError("PostgresClient is closed")
        conn = self._pool.getconn()
        try:
            yield conn
        finally:
            if conn.status != psycopg2.extensions.STATUS_READY:
                conn.rollback()
            self._pool.putconn(conn)

    @contextmanager
    def _statement(self, query: str, params: Params, as_dicts: bool = True):
        """Run one statement and yield (conn, cursor); the caller commits."""
        factory = psycopg2.extras.RealDictCursor if as_dicts else None
        with self.connection() as conn:
            with conn.cursor(cursor_factory=factory) as cur:
                cur.execute(query, adapt_value(params))
                yield conn, cur

    def execute(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """All result rows; an empty list for statements that return none."""
        with self._statement(query, params) as (conn, cur):
            rows = [dict(row) for row in cur.fetchall()] if cur.description else []
            conn.commit()
        return rows

    def execute_single(self, query: str, params: Params = None) -> Dict[str, Any] | None:
        rows = self.execute(query, params)
        return rows[0] if rows else None

    def execute_scalar(self, query: str, params: Params = None) -> Any:
        """First column of the first row, or None."""
        with self._statement(query, params, as_dicts=False) as (conn, cur):
            first = cur.fetchone()
            conn.commit()
        return None if first is None else first[0]

    def execute_returning(
        self,
        query: str,
        params: Params = None,
        max_rows: int | None = None,
    ) -> List[Dict[str, Any]]:
        """
        Run a write with RETURNING and commit it.

        Raises:
            UnexpectedRowCountError: More than max_rows rows came back; the
                write is rolled back
        """
        with self._statement(query, params) as (conn, cur):
            rows = [dict(row) for row in cur.fetchall()]
            if max_rows is not None and len(rows) > max_rows:
                conn.rollback()
                raise UnexpectedRowCountError(max_rows, len(rows))
            conn.commit()
        return rows

    def execute_script(self, script: str) -> None:
        """Several DDL statements in a single transaction."""
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(script)
            conn.commit()

    def close(self) -> None:
        """Close the pool; later calls raise RuntimeError. Safe to repeat."""
        if self._pool is None:
            return
        self._pool.closeall()
        self._pool = None
        logger.info("PostgreSQL pool closed")
