"""
Data access layer for the reporting database.
Provides read-only access to PostgreSQL through a bounded connection pool.
"""

import datetime
import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import psycopg2
from psycopg2 import extras, pool

from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def to_json_value(value: Any) -> Any:
    """
    Convert a psycopg2 column value into its JSON transport form.

    NUMERIC columns arrive as ``Decimal`` and leave as exact strings;
    dates and timestamps leave as ISO-8601 strings.
    """
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime.date, datetime.datetime, datetime.time)):
        return value.isoformat()
    return value


def convert_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {key: to_json_value(value) for key, value in row.items()}


@dataclass
class QueryResult:
    """Rows returned by one statement."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


class ReportingDataProvider:
    """
    Executes read-only statements against the reporting database.

    Lifecycle: construct, ``open()`` on startup, ``close()`` on shutdown.
    Thread-safe; ``query()`` is called from the server's worker threads.
    """

    def __init__(self, config: Settings = None):
        """
        Args:
            config: Settings to read the DSN and pool bounds from
                (defaults to the module-level settings)
        """
        self.config = config or default_settings
        self._pool: Optional[pool.ThreadedConnectionPool] = None
        self._slots: Optional[threading.BoundedSemaphore] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        """
        Create the connection pool.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        if self._pool is not None:
            return
        cfg = self.config
        try:
            self._pool = pool.ThreadedConnectionPool(
                cfg.DB_POOL_MIN,
                cfg.DB_POOL_MAX,
                cfg.DATABASE_URL,
                sslmode=cfg.DB_SSLMODE,
                options=f"-c statement_timeout={cfg.DB_STATEMENT_TIMEOUT_MS}",
                application_name="report_api",
            )
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise
        self._slots = threading.BoundedSemaphore(cfg.DB_POOL_MAX)
        logger.info(
            f"Database pool ready (min={cfg.DB_POOL_MIN}, max={cfg.DB_POOL_MAX}, "
            f"sslmode={cfg.DB_SSLMODE})"
        )

    def close(self) -> None:
        """Close all pooled connections."""
        if self._pool is None:
            return
        self._pool.closeall()
        self._pool = None
        self._slots = None
        logger.info("Database pool closed")

    # ----------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------

    def query(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """
        Execute one statement and return its converted rows.

        Args:
            sql: SQL text with ``%s`` placeholders
            params: Values bound to the placeholders, in order

        Returns:
            QueryResult with JSON-ready rows and the row count

        Raises:
            RuntimeError: If the pool is not open or no connection frees up
                within DB_ACQUIRE_TIMEOUT
            psycopg2.Error: On any database failure
        """
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call open() first.")

        slots = self._slots
        if not slots.acquire(timeout=self.config.DB_ACQUIRE_TIMEOUT):
            raise RuntimeError("Timed out waiting for a database connection")
        try:
            conn = self._pool.getconn()
            try:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(sql, tuple(params))
                    rows = [convert_row(row) for row in cur.fetchall()]
                    row_count = cur.rowcount
                conn.rollback()
            except psycopg2.Error:
                if not conn.closed:
                    conn.rollback()
                raise
            finally:
                self._pool.putconn(conn, close=bool(conn.closed))
        finally:
            slots.release()

        return QueryResult(rows=rows, row_count=row_count)
