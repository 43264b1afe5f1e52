"""SQLAlchemy engine-backed connection implementation."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine, RootTransaction
from sqlalchemy.exc import SQLAlchemyError

from safequery.database.interfaces import DatabaseConnection
from safequery.exceptions import NotConnectedError
from safequery.log import format_statement, get_logger
from safequery.types import DatabaseParamType, ParamStyle, RowType

logger = get_logger(__name__)


class SQLAlchemyConnection(DatabaseConnection):
    """Connection over a SQLAlchemy ``Engine``.

    Statements go through ``text()`` with ``:p<index>`` placeholders, so any
    backend SQLAlchemy supports can sit underneath. Positional parameter
    lists are converted to ``{"p0": ..., "p1": ...}``; dicts pass through.
    """

    param_style = ParamStyle.NAMED
    driver_errors = (SQLAlchemyError,)

    def __init__(
        self,
        engine: Engine,
        table_prefix: str = "",
        strict_conditions: bool = False,
        log_bindings: bool = True,
    ) -> None:
        super().__init__(
            table_prefix=table_prefix,
            strict_conditions=strict_conditions,
            log_bindings=log_bindings,
        )
        self.engine = engine
        self._connection: Connection | None = None
        self._transaction: RootTransaction | None = None

    def connect(self) -> None:
        """Check out a connection from the engine."""
        try:
            self._connection = self.engine.connect()
            logger.info(f"Connected to {self.engine.url.render_as_string()}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    def disconnect(self) -> None:
        """Return the connection to the engine."""
        if self._connection:
            if self._transaction is not None and self._transaction.is_active:
                logger.warning("Disconnecting with an open transaction; rolling back")
                self._transaction.rollback()
            self._connection.close()
            self._connection = None
            self._transaction = None
            self._in_transaction = False
            logger.info("Disconnected from database")

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def driver(self) -> Connection:
        """The checked-out SQLAlchemy ``Connection``."""
        return self._require_connection()

    def _require_connection(self) -> Connection:
        if not self._connection:
            raise NotConnectedError("Database not connected")
        return self._connection

    @staticmethod
    def _shape_params(params: DatabaseParamType) -> dict[str, Any]:
        if not params:
            return {}
        if isinstance(params, dict):
            return params
        return {f"p{index}": value for index, value in enumerate(params)}

    def _run(self, query: str, params: DatabaseParamType) -> CursorResult[Any]:
        connection = self._require_connection()
        shaped = self._shape_params(params)
        logger.debug(format_statement(query, shaped, self.log_bindings))
        return connection.execute(text(query), shaped)

    def _finish(self, success: bool) -> None:
        """End the implicit per-statement transaction outside explicit ones."""
        if self._in_transaction or self._connection is None:
            return
        if success:
            self._connection.commit()
        else:
            self._connection.rollback()

    def execute(self, query: str, params: DatabaseParamType = None) -> int:
        """Execute a raw statement with ``:name`` placeholders."""
        try:
            affected, _ = self._execute_write(query, params)
            return affected
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {e}")
            raise

    def _execute_write(
        self, query: str, params: DatabaseParamType
    ) -> tuple[int, int | None]:
        try:
            result = self._run(query, params)
            affected, row_id = result.rowcount, result.lastrowid
        except SQLAlchemyError:
            self._finish(success=False)
            raise
        self._finish(success=True)
        return affected, row_id

    def _fetch(
        self, query: str, params: DatabaseParamType, action: str
    ) -> list[RowType]:
        try:
            result = self._run(query, params)
            rows = [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"{action} failed: {e}")
            self._finish(success=False)
            raise
        self._finish(success=True)
        return rows

    def fetch_one(
        self, query: str, params: DatabaseParamType = None
    ) -> RowType | None:
        rows = self._fetch(query, params, "Fetch one")
        return rows[0] if rows else None

    def fetch_all(
        self, query: str, params: DatabaseParamType = None
    ) -> list[RowType]:
        return self._fetch(query, params, "Fetch all")

    def fetch_scalar(self, query: str, params: DatabaseParamType = None) -> Any:
        rows = self._fetch(query, params, "Fetch scalar")
        if not rows:
            return None
        return next(iter(rows[0].values()), None)

    def begin_transaction(self) -> bool:
        """Begin a transaction on the checked-out connection."""
        connection = self._require_connection()
        if connection.in_transaction():
            connection.commit()
        self._transaction = connection.begin()
        self._in_transaction = True
        logger.debug("Transaction started")
        return True

    def commit(self) -> bool:
        """Commit the current transaction."""
        connection = self._require_connection()
        if self._transaction is not None:
            self._transaction.commit()
        else:
            connection.commit()
        self._transaction = None
        self._in_transaction = False
        logger.debug("Transaction committed")
        return True

    def rollback(self) -> bool:
        """Roll back the current transaction."""
        connection = self._require_connection()
        if self._transaction is not None:
            self._transaction.rollback()
        else:
            connection.rollback()
        self._transaction = None
        self._in_transaction = False
        logger.debug("Transaction rolled back")
        return True
