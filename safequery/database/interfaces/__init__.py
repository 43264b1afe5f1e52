"""Database interfaces module."""

from .connection import DatabaseConnection

__all__ = [
    "DatabaseConnection",
]
