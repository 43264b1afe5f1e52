"""Fluent SELECT/INSERT/UPDATE/DELETE builder over a DatabaseConnection."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

from safequery.database.binder import (
    Binder,
    validate_column,
    validate_identifier,
    validate_value,
)
from safequery.database.clauses import (
    Condition,
    NULL_OPERATORS,
    InCondition,
    NeverCondition,
    OrderBy,
    WhereClause,
    normalize_operator,
)
from safequery.database.utils import row_to_model
from safequery.exceptions import InvalidBindingError, UnsupportedConditionError
from safequery.log import get_logger
from safequery.types import BindingValue, DatabaseParamType, ParamStyle, RowType

if TYPE_CHECKING:
    from safequery.database.interfaces.connection import DatabaseConnection

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

COUNT_COLUMN = "COUNT(*) AS aggregate"

_MISSING: Any = object()


@dataclass(frozen=True)
class CompiledQuery:
    """Rendered SQL text plus the values for its placeholders, in order."""

    sql: str
    bindings: tuple[BindingValue, ...]
    style: ParamStyle = ParamStyle.QMARK

    @property
    def params(self) -> DatabaseParamType:
        """Bindings shaped for the driver: a dict for named style, else a list."""
        if self.style == ParamStyle.NAMED:
            return {f"p{index}": value for index, value in enumerate(self.bindings)}
        return list(self.bindings)


class QueryBuilder:
    """Fluent query builder for a single table.

    Configuration methods return the builder itself. Terminal methods
    (``get``, ``first``, ``count``, ``insert``, ``update``, ``delete``) render
    from the current state without modifying it, so one builder may serve
    several terminal calls.

    Example:
        >>> posts = connection.table("posts")
        >>> posts.select("id", "title").where("status", "published").limit(5).get()
    """

    def __init__(
        self,
        connection: "DatabaseConnection",
        table: str,
        param_style: ParamStyle | None = None,
        strict_conditions: bool = False,
    ) -> None:
        """Initialize the builder.

        Args:
            connection: Connection that executes rendered statements
            table: Full table name, optionally schema-qualified
            param_style: Placeholder style; defaults to the connection's
            strict_conditions: Raise instead of dropping non-equality
                clauses on update/delete

        Raises:
            InvalidIdentifierError: If the table name is invalid
        """
        self._table = validate_identifier(table, "table")
        self.connection = connection
        self.strict_conditions = strict_conditions
        style = param_style if param_style is not None else connection.param_style
        self._binder = Binder(ParamStyle(style))
        self._columns: list[str] = ["*"]
        self._wheres: list[WhereClause] = []
        self._orders: list[OrderBy] = []
        self._limit: int | None = None
        self._offset: int | None = None

    @property
    def table(self) -> str:
        return self._table

    @property
    def bindings(self) -> list[BindingValue]:
        """Values bound by WHERE calls so far."""
        return self._binder.values

    @property
    def wheres(self) -> list[WhereClause]:
        return list(self._wheres)

    # Configuration

    def select(self, *columns: str | Sequence[str]) -> "QueryBuilder":
        """Replace the selected columns.

        Accepts varargs (``select("id", "name")``) or a single list. With no
        arguments the selection resets to ``*``.
        """
        if len(columns) == 1 and isinstance(columns[0], (list, tuple)):
            columns = tuple(columns[0])

        if not columns:
            self._columns = ["*"]
        else:
            self._columns = [
                validate_column(column, allow_wildcard=True)  # type: ignore[arg-type]
                for column in columns
            ]
        return self

    def where(
        self, column: str, operator: Any, value: Any = _MISSING
    ) -> "QueryBuilder":
        """Add a comparison.

        ``where("status", "active")`` means ``status = ?``;
        ``where("price", ">", 100)`` keeps the explicit operator. A ``None``
        value is bound as NULL, with ``=`` and ``!=`` rewritten to ``IS`` and
        ``IS NOT``.
        """
        validate_column(column)
        if value is _MISSING:
            operator, value = "=", operator
        else:
            operator = normalize_operator(operator)

        if value is None:
            operator = NULL_OPERATORS.get(operator, operator)

        index = self._binder.bind(value)
        self._wheres.append(Condition(column, operator, index))
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        """Add ``column IN (...)``; an empty list matches no rows."""
        validate_column(column)
        if isinstance(values, (str, bytes)):
            raise InvalidBindingError(
                "where_in() expects a collection of values, "
                f"got {type(values).__name__}"
            )

        values = [validate_value(value) for value in values]
        if not values:
            self._wheres.append(NeverCondition(self._binder.bind(0)))
            return self

        indices = tuple(self._binder.bind(value) for value in values)
        self._wheres.append(InCondition(column, indices))
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        """Append an ORDER BY term; anything but ``desc`` sorts ascending."""
        self._orders.append(OrderBy.create(column, direction))
        return self

    def limit(self, limit: int) -> "QueryBuilder":
        self._limit = _check_count("limit", limit)
        return self

    def offset(self, offset: int) -> "QueryBuilder":
        self._offset = _check_count("offset", offset)
        return self

    # Rendering

    def compile(self) -> CompiledQuery:
        """Render the SELECT statement for the current state."""
        return self._compile_select()

    def to_sql(self) -> str:
        """SELECT SQL for the current state, without executing it."""
        return self._compile_select().sql

    def _compile_select(
        self, columns: list[str] | None = None, limit: int | None = _MISSING
    ) -> CompiledQuery:
        binder = self._binder.copy()
        sql = f"SELECT {', '.join(columns or self._columns)} FROM {self._table}"

        if self._wheres:
            sql += " WHERE " + " AND ".join(
                clause.render(binder) for clause in self._wheres
            )

        if self._orders:
            sql += " ORDER BY " + ", ".join(order.render() for order in self._orders)

        if limit is _MISSING:
            limit = self._limit
        if limit is not None:
            sql += f" LIMIT {binder.placeholder(binder.bind(limit))}"

        if self._offset is not None:
            sql += f" OFFSET {binder.placeholder(binder.bind(self._offset))}"

        return CompiledQuery(sql, tuple(binder.values), binder.style)

    def build_where_map(self) -> dict[str, BindingValue]:
        """Equality conditions as a ``column -> value`` map.

        Only ``=`` comparisons (and ``IS NULL``) contribute; later duplicates
        win. Every other clause is left out of the map.
        """
        where, _ = self._split_conditions()
        return where

    def _split_conditions(
        self,
    ) -> tuple[dict[str, BindingValue], list[WhereClause]]:
        where: dict[str, BindingValue] = {}
        dropped: list[WhereClause] = []
        for clause in self._wheres:
            if isinstance(clause, Condition) and self._is_keyed(clause):
                where[clause.column] = self._binder.value(clause.index)
            else:
                dropped.append(clause)
        return where, dropped

    def _is_keyed(self, clause: Condition) -> bool:
        if clause.operator == "=":
            return True
        return clause.operator == "IS" and self._binder.value(clause.index) is None

    def _where_map_for(
        self, action: str, strict: bool | None
    ) -> dict[str, BindingValue]:
        where, dropped = self._split_conditions()
        if not dropped:
            return where

        described = ", ".join(_describe(clause) for clause in dropped)
        if self.strict_conditions if strict is None else strict:
            raise UnsupportedConditionError(
                f"Cannot {action} {self._table} by keyed conditions: "
                f"unsupported clauses {described}"
            )
        logger.warning(
            f"{action.capitalize()} on {self._table} ignores non-equality "
            f"clauses: {described}"
        )
        return where

    def _matches_nothing(self) -> bool:
        return any(isinstance(clause, NeverCondition) for clause in self._wheres)

    # Terminal operations

    def get(self, model: type[T] | None = None) -> list[RowType] | list[T]:
        """Fetch all matching rows (empty list when nothing matches)."""
        compiled = self._compile_select()
        rows = self.connection.fetch_all(compiled.sql, compiled.params)
        if model is None:
            return rows
        return [row_to_model(model, row) for row in rows]

    def first(self, model: type[T] | None = None) -> RowType | T | None:
        """Fetch the first matching row, or None. The builder's limit is kept."""
        compiled = self._compile_select(limit=1)
        row = self.connection.fetch_one(compiled.sql, compiled.params)
        if row is None or model is None:
            return row
        return row_to_model(model, row)

    def count(self) -> int:
        """Count matching rows. The builder's selected columns are kept."""
        compiled = self._compile_select(columns=[COUNT_COLUMN])
        result = self.connection.fetch_scalar(compiled.sql, compiled.params)
        return int(result or 0)

    def insert(self, data: dict[str, Any]) -> int | None:
        """Insert a row; returns the new row id, or None on failure."""
        return self.connection.insert_row(self._table, data)

    def update(self, data: dict[str, Any], strict: bool | None = None) -> int | None:
        """Update rows matching the equality conditions.

        Returns:
            Affected row count, or None on failure

        Raises:
            UnsupportedConditionError: In strict mode, when a non-equality
                clause would otherwise be ignored
        """
        if self._matches_nothing():
            logger.debug(f"Update on {self._table} skipped: empty IN list")
            return 0
        where = self._where_map_for("update", strict)
        return self.connection.update_rows(self._table, data, where)

    def delete(self, strict: bool | None = None) -> int | None:
        """Delete rows matching the equality conditions.

        Returns:
            Affected row count, or None on failure

        Raises:
            UnsupportedConditionError: In strict mode, when a non-equality
                clause would otherwise be ignored
        """
        if self._matches_nothing():
            logger.debug(f"Delete on {self._table} skipped: empty IN list")
            return 0
        where = self._where_map_for("delete", strict)
        return self.connection.delete_rows(self._table, where)

    def __repr__(self) -> str:
        return f"QueryBuilder(table={self._table!r}, sql={self.to_sql()!r})"


def _check_count(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _describe(clause: WhereClause) -> str:
    if isinstance(clause, NeverCondition):
        return "1 = 0"
    return f"{clause.column} {clause.operator}"
