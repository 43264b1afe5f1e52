"""Common type definitions for the safequery system."""

from enum import Enum
from typing import Any, TypeAlias

BindingValue: TypeAlias = str | int | float | bool | None
DatabaseParamType: TypeAlias = dict[str, Any] | list[Any] | tuple[Any, ...] | None
RowType: TypeAlias = dict[str, Any]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ParamStyle(str, Enum):
    """Placeholder syntax understood by a database driver."""

    QMARK = "qmark"
    FORMAT = "format"
    NAMED = "named"


class SortDirection(str, Enum):
    """ORDER BY directions."""

    ASC = "ASC"
    DESC = "DESC"
