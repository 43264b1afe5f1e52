"""SQLite database implementation package."""

from .sqlite_connection import SQLiteConnection

__all__ = [
    "SQLiteConnection",
]
