"""SQLAlchemy engine implementation package."""

from .sqlalchemy_connection import SQLAlchemyConnection

__all__ = [
    "SQLAlchemyConnection",
]
