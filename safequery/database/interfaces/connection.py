"""Database connection interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import Any

from safequery.database.binder import validate_identifier
from safequery.database.query_builder import QueryBuilder
from safequery.database.utils import build_delete, build_insert, build_update
from safequery.log import get_logger
from safequery.types import BindingValue, DatabaseParamType, ParamStyle, RowType

logger = get_logger(__name__)


class DatabaseConnection(ABC):
    """Abstract database connection.

    Executes parameterized SQL on behalf of ``QueryBuilder``. Fetch methods
    and ``execute`` propagate driver errors; the keyed write primitives
    (``insert_row``, ``update_rows``, ``delete_rows``) return ``None`` on
    failure and record the message in ``last_error``.
    """

    param_style: ParamStyle = ParamStyle.QMARK
    driver_errors: tuple[type[Exception], ...] = ()

    def __init__(
        self,
        table_prefix: str = "",
        strict_conditions: bool = False,
        log_bindings: bool = True,
    ) -> None:
        """Initialize database connection.

        Args:
            table_prefix: Prefix prepended to names passed to ``table()``
            strict_conditions: Default strictness for builders created here
            log_bindings: Show bound values in DEBUG statement logs
        """
        self.table_prefix = table_prefix
        self.strict_conditions = strict_conditions
        self.log_bindings = log_bindings
        self._last_error = ""
        self._last_insert_id: int | None = None
        self._in_transaction = False

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close database connection."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active."""
        pass

    @property
    @abstractmethod
    def driver(self) -> Any:
        """The underlying driver connection, for work the builder cannot express.

        Raises:
            NotConnectedError: If called before ``connect()``
        """
        pass

    @abstractmethod
    def execute(self, query: str, params: DatabaseParamType = None) -> int:
        """Execute a raw statement.

        Args:
            query: SQL with placeholders in this connection's param style
            params: Values for the placeholders

        Returns:
            Number of affected rows (-1 when the driver does not report it)
        """
        pass

    @abstractmethod
    def fetch_one(
        self, query: str, params: DatabaseParamType = None
    ) -> RowType | None:
        """Fetch single row.

        Returns:
            Single row as dictionary or None if not found
        """
        pass

    @abstractmethod
    def fetch_all(
        self, query: str, params: DatabaseParamType = None
    ) -> list[RowType]:
        """Fetch all rows.

        Returns:
            List of rows as dictionaries, empty when nothing matches
        """
        pass

    @abstractmethod
    def fetch_scalar(self, query: str, params: DatabaseParamType = None) -> Any:
        """Fetch the first column of the first row, or None."""
        pass

    @abstractmethod
    def _execute_write(
        self, query: str, params: DatabaseParamType
    ) -> tuple[int, int | None]:
        """Run a write statement, committing unless a transaction is open.

        Returns:
            Tuple of (affected row count, last inserted row id)

        Raises:
            Any of ``driver_errors`` on failure
        """
        pass

    def insert_row(self, table: str, data: dict[str, Any]) -> int | None:
        """Insert a row.

        Returns:
            Generated row id, or None on failure

        Raises:
            InvalidIdentifierError: If the table or a column name is invalid
        """
        if not data:
            self._record_error(
                f"Insert into {table}", ValueError("Cannot insert empty data")
            )
            return None

        query, params = build_insert(table, data, self.param_style)
        try:
            _, row_id = self._execute_write(query, params)
        except self.driver_errors as e:
            self._record_error(f"Insert into {table}", e)
            return None

        self._last_insert_id = row_id
        return row_id

    def update_rows(
        self, table: str, data: dict[str, Any], where: dict[str, BindingValue]
    ) -> int | None:
        """Update rows matching an equality map.

        An empty ``where`` is refused so a whole table is never rewritten.

        Returns:
            Affected row count, or None on failure
        """
        if not data or not where:
            reason = "empty data" if not data else "no conditions"
            self._record_error(
                f"Update of {table}", ValueError(f"Refusing update with {reason}")
            )
            return None

        query, params = build_update(table, data, where, self.param_style)
        try:
            affected, _ = self._execute_write(query, params)
        except self.driver_errors as e:
            self._record_error(f"Update of {table}", e)
            return None
        return affected

    def delete_rows(self, table: str, where: dict[str, BindingValue]) -> int | None:
        """Delete rows matching an equality map.

        An empty ``where`` is refused so a whole table is never emptied.

        Returns:
            Affected row count, or None on failure
        """
        if not where:
            self._record_error(
                f"Delete from {table}", ValueError("Refusing delete with no conditions")
            )
            return None

        query, params = build_delete(table, where, self.param_style)
        try:
            affected, _ = self._execute_write(query, params)
        except self.driver_errors as e:
            self._record_error(f"Delete from {table}", e)
            return None
        return affected

    @abstractmethod
    def begin_transaction(self) -> bool:
        """Start a transaction."""
        pass

    @abstractmethod
    def commit(self) -> bool:
        """Commit the current transaction."""
        pass

    @abstractmethod
    def rollback(self) -> bool:
        """Roll back the current transaction."""
        pass

    def table(self, name: str) -> QueryBuilder:
        """Create a query builder for ``table_prefix + name``.

        Raises:
            InvalidIdentifierError: If the resulting table name is invalid
        """
        full_name = validate_identifier(f"{self.table_prefix}{name}", "table")
        return QueryBuilder(
            self,
            full_name,
            param_style=self.param_style,
            strict_conditions=self.strict_conditions,
        )

    @contextmanager
    def transaction(self) -> Iterator["DatabaseConnection"]:
        """Run a block in a transaction; commit on success, roll back on error."""
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        else:
            self.commit()

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    @property
    def last_insert_id(self) -> int | None:
        return self._last_insert_id

    @property
    def last_error(self) -> str:
        """Message of the most recent failed write primitive."""
        return self._last_error

    def _record_error(self, action: str, error: Exception) -> None:
        self._last_error = str(error)
        logger.error(f"{action} failed: {error}")

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.disconnect()
