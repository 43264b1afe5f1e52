"""Safe, parameterized SQL query building and execution."""

from .config import Settings, configure_logging, load_settings, settings
from .database import (
    CompiledQuery,
    DatabaseConnection,
    QueryBuilder,
    SQLAlchemyConnection,
    SQLiteConnection,
    create_connection,
)
from .exceptions import (
    InvalidBindingError,
    InvalidIdentifierError,
    InvalidOperatorError,
    NotConnectedError,
    SafeQueryError,
    UnsupportedConditionError,
)
from .log import (
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .types import Environment, ParamStyle

__all__ = [
    "CompiledQuery",
    "DatabaseConnection",
    "Environment",
    "InvalidBindingError",
    "InvalidIdentifierError",
    "InvalidOperatorError",
    "NotConnectedError",
    "ParamStyle",
    "QueryBuilder",
    "SQLAlchemyConnection",
    "SQLiteConnection",
    "SafeQueryError",
    "Settings",
    "configure_logging",
    "UnsupportedConditionError",
    "create_connection",
    "get_logger",
    "load_settings",
    "settings",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
]
