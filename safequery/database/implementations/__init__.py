"""Database implementations package."""

from .sqlalchemy import SQLAlchemyConnection
from .sqlite import SQLiteConnection

__all__ = [
    "SQLiteConnection",
    "SQLAlchemyConnection",
]
