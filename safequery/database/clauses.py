"""Clause value types accumulated by the query builder."""

from dataclasses import dataclass
from typing import TypeAlias

from safequery.database.binder import Binder, validate_column
from safequery.exceptions import InvalidOperatorError
from safequery.types import SortDirection

OPERATORS = frozenset(
    ["=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE", "IS", "IS NOT"]
)

# Comparisons against NULL only match through IS / IS NOT
NULL_OPERATORS = {"=": "IS", "!=": "IS NOT", "<>": "IS NOT"}


def normalize_operator(operator: str) -> str:
    """Upper-case and collapse whitespace, then check the allow-list.

    Raises:
        InvalidOperatorError: If the operator is not supported
    """
    if not isinstance(operator, str):
        raise InvalidOperatorError(f"Invalid operator: {operator!r}")
    normalized = " ".join(operator.split()).upper()
    if normalized not in OPERATORS:
        raise InvalidOperatorError(
            f"Invalid operator: {operator!r}. Allowed: {', '.join(sorted(OPERATORS))}"
        )
    return normalized


def normalize_direction(direction: str) -> SortDirection:
    """DESC when the input is case-insensitively ``desc``, ASC otherwise."""
    if isinstance(direction, str) and direction.strip().upper() == "DESC":
        return SortDirection.DESC
    return SortDirection.ASC


@dataclass(frozen=True)
class Condition:
    """``column <operator> ?`` bound to a single value."""

    column: str
    operator: str
    index: int

    def render(self, binder: Binder) -> str:
        return f"{self.column} {self.operator} {binder.placeholder(self.index)}"


@dataclass(frozen=True)
class InCondition:
    """``column IN (?, ?, ...)`` with one binding per value."""

    column: str
    indices: tuple[int, ...]

    @property
    def operator(self) -> str:
        return "IN"

    def render(self, binder: Binder) -> str:
        placeholders = ", ".join(binder.placeholder(i) for i in self.indices)
        return f"{self.column} IN ({placeholders})"


@dataclass(frozen=True)
class NeverCondition:
    """Predicate that matches no rows, produced by an empty IN list."""

    index: int

    @property
    def operator(self) -> str:
        return "="

    def render(self, binder: Binder) -> str:
        return f"1 = {binder.placeholder(self.index)}"


WhereClause: TypeAlias = Condition | InCondition | NeverCondition


@dataclass(frozen=True)
class OrderBy:
    """A single ORDER BY term."""

    column: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def create(cls, column: str, direction: str = "ASC") -> "OrderBy":
        return cls(validate_column(column), normalize_direction(direction))

    def render(self) -> str:
        return f"{self.column} {self.direction.value}"
