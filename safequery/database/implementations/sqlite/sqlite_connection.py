"""SQLite database connection implementation."""

import sqlite3
from pathlib import Path
from typing import Any

from safequery.database.interfaces import DatabaseConnection
from safequery.exceptions import NotConnectedError
from safequery.log import format_statement, get_logger
from safequery.types import DatabaseParamType, ParamStyle, RowType

logger = get_logger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteConnection(DatabaseConnection):
    """SQLite database connection implementation."""

    param_style = ParamStyle.QMARK
    driver_errors = (sqlite3.Error,)

    def __init__(
        self,
        db_path: str | Path,
        table_prefix: str = "",
        strict_conditions: bool = False,
        timeout: float = 60.0,
        log_bindings: bool = True,
    ) -> None:
        """Initialize SQLite connection.

        Args:
            db_path: Path to SQLite database file, or ``:memory:``
            table_prefix: Prefix prepended to names passed to ``table()``
            strict_conditions: Default strictness for builders created here
            timeout: Seconds to wait for a locked database
            log_bindings: Show bound values in DEBUG statement logs
        """
        super().__init__(
            table_prefix=table_prefix,
            strict_conditions=strict_conditions,
            log_bindings=log_bindings,
        )
        self.db_path = db_path if db_path == MEMORY_DATABASE else Path(db_path)
        self.timeout = timeout
        self._connection: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Establish SQLite database connection."""
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=self.timeout,
            )
            self._connection.row_factory = sqlite3.Row
            self._configure_connection()
            logger.info(f"Connected to SQLite: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to SQLite database: {e}")
            raise

    def disconnect(self) -> None:
        """Close SQLite database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            self._in_transaction = False
            logger.info("Disconnected from SQLite")

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._connection is not None

    @property
    def driver(self) -> sqlite3.Connection:
        """The raw ``sqlite3.Connection``."""
        return self._require_connection()

    def _configure_connection(self) -> None:
        """Configure SQLite connection settings."""
        if not self._connection:
            return

        self._connection.execute("PRAGMA foreign_keys = ON")
        self._connection.execute(f"PRAGMA busy_timeout = {int(self.timeout * 1000)}")
        if isinstance(self.db_path, Path):
            self._connection.execute("PRAGMA journal_mode = DELETE")
            self._connection.execute("PRAGMA synchronous = NORMAL")

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise NotConnectedError("Database not connected")
        return self._connection

    def _cursor(self, query: str, params: DatabaseParamType) -> sqlite3.Cursor:
        connection = self._require_connection()
        logger.debug(format_statement(query, params, self.log_bindings))
        cursor = connection.cursor()
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)
        return cursor

    def execute(self, query: str, params: DatabaseParamType = None) -> int:
        """Execute a raw statement.

        Args:
            query: SQL query with ``?`` placeholders
            params: Query parameters

        Returns:
            Number of affected rows
        """
        try:
            affected, _ = self._execute_write(query, params)
            return affected
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {e}")
            raise

    def _execute_write(
        self, query: str, params: DatabaseParamType
    ) -> tuple[int, int | None]:
        connection = self._require_connection()
        try:
            cursor = self._cursor(query, params)
            if not self._in_transaction:
                connection.commit()
            return cursor.rowcount, cursor.lastrowid
        except sqlite3.Error:
            if not self._in_transaction:
                connection.rollback()
            raise

    def fetch_one(
        self, query: str, params: DatabaseParamType = None
    ) -> RowType | None:
        """Fetch single row.

        Args:
            query: SQL query
            params: Query parameters

        Returns:
            Single row as dictionary or None
        """
        try:
            row = self._cursor(query, params).fetchone()
            if row:
                return dict(row)
            return None
        except sqlite3.Error as e:
            logger.error(f"Fetch one failed: {e}")
            raise

    def fetch_all(
        self, query: str, params: DatabaseParamType = None
    ) -> list[RowType]:
        """Fetch all rows.

        Args:
            query: SQL query
            params: Query parameters

        Returns:
            List of rows as dictionaries
        """
        try:
            rows = self._cursor(query, params).fetchall()
            return [dict(row) for row in rows]
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {e}")
            raise

    def fetch_scalar(self, query: str, params: DatabaseParamType = None) -> Any:
        """Fetch the first column of the first row, or None."""
        try:
            row = self._cursor(query, params).fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            logger.error(f"Fetch scalar failed: {e}")
            raise

    def begin_transaction(self) -> bool:
        """Begin a transaction on the shared connection."""
        connection = self._require_connection()
        if connection.in_transaction:
            connection.commit()
        connection.execute("BEGIN")
        self._in_transaction = True
        logger.debug("Transaction started")
        return True

    def commit(self) -> bool:
        """Commit the current transaction."""
        self._require_connection().commit()
        self._in_transaction = False
        logger.debug("Transaction committed")
        return True

    def rollback(self) -> bool:
        """Rollback the current transaction."""
        self._require_connection().rollback()
        self._in_transaction = False
        logger.debug("Transaction rolled back")
        return True
