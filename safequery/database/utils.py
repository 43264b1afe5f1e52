"""Statement rendering for the connection's keyed write primitives."""

from typing import Any, TypeVar

from pydantic import BaseModel

from safequery.database.binder import Binder, validate_column, validate_identifier
from safequery.types import DatabaseParamType, ParamStyle, RowType

T = TypeVar("T", bound=BaseModel)


def row_to_model(model_class: type[T], row: RowType | tuple[Any, ...]) -> T:
    """Convert a database row to a Pydantic model.

    Args:
        model_class: The Pydantic model class to convert to
        row: Database row as dict or tuple

    Returns:
        Instance of the Pydantic model

    Raises:
        ValueError: If row type is not supported
    """
    if isinstance(row, dict):
        return model_class.model_validate(row)

    if not isinstance(row, tuple):
        raise ValueError(f"Unsupported row type: {type(row)}")

    field_names = list(model_class.model_fields.keys())
    if len(field_names) != len(row):
        raise ValueError(
            f"Tuple length ({len(row)}) doesn't match model fields "
            f"({len(field_names)})"
        )
    return model_class.model_validate(dict(zip(field_names, row, strict=False)))


def build_where_clause(conditions: dict[str, Any], binder: Binder) -> str:
    """Build a WHERE clause from an equality map.

    ``None`` values render as ``IS NULL`` and bind nothing.

    Example:
        >>> binder = Binder(ParamStyle.QMARK)
        >>> build_where_clause({"name": "John", "deleted_at": None}, binder)
        'WHERE name = ? AND deleted_at IS NULL'
    """
    if not conditions:
        return ""

    clauses: list[str] = []
    for column, value in conditions.items():
        validate_column(column)
        if value is None:
            clauses.append(f"{column} IS NULL")
        else:
            clauses.append(f"{column} = {binder.placeholder(binder.bind(value))}")

    return f"WHERE {' AND '.join(clauses)}"


def build_insert(
    table: str, data: dict[str, Any], style: ParamStyle = ParamStyle.QMARK
) -> tuple[str, DatabaseParamType]:
    """Build an INSERT statement.

    Raises:
        ValueError: If data is empty
    """
    if not data:
        raise ValueError("Cannot insert empty data")

    validate_identifier(table, "table")
    binder = Binder(style)
    columns = []
    placeholders = []
    for column, value in data.items():
        columns.append(validate_column(column))
        placeholders.append(binder.placeholder(binder.bind(value)))

    query = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join(placeholders)})"
    )
    return query, binder.params()


def build_update(
    table: str,
    data: dict[str, Any],
    where: dict[str, Any],
    style: ParamStyle = ParamStyle.QMARK,
) -> tuple[str, DatabaseParamType]:
    """Build an UPDATE statement restricted by an equality map.

    Raises:
        ValueError: If data or where is empty
    """
    if not data:
        raise ValueError("Cannot update with empty data")
    if not where:
        raise ValueError("Refusing to update without conditions")

    validate_identifier(table, "table")
    binder = Binder(style)
    assignments = [
        f"{validate_column(column)} = {binder.placeholder(binder.bind(value))}"
        for column, value in data.items()
    ]
    where_clause = build_where_clause(where, binder)

    query = f"UPDATE {table} SET {', '.join(assignments)} {where_clause}"
    return query, binder.params()


def build_delete(
    table: str, where: dict[str, Any], style: ParamStyle = ParamStyle.QMARK
) -> tuple[str, DatabaseParamType]:
    """Build a DELETE statement restricted by an equality map.

    Raises:
        ValueError: If where is empty
    """
    if not where:
        raise ValueError("Refusing to delete without conditions")

    validate_identifier(table, "table")
    binder = Binder(style)
    where_clause = build_where_clause(where, binder)

    return f"DELETE FROM {table} {where_clause}", binder.params()
