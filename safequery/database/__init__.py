"""Query building and execution over relational databases."""

from .binder import Binder, validate_column, validate_identifier, validate_value
from .engine import create_connection, create_database_engine
from .implementations import SQLAlchemyConnection, SQLiteConnection
from .interfaces import DatabaseConnection
from .query_builder import CompiledQuery, QueryBuilder

__all__ = [
    "Binder",
    "CompiledQuery",
    "DatabaseConnection",
    "QueryBuilder",
    "SQLAlchemyConnection",
    "SQLiteConnection",
    "create_connection",
    "create_database_engine",
    "validate_column",
    "validate_identifier",
    "validate_value",
]
