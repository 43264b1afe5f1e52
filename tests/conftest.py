"""Global pytest configuration and fixtures."""

from collections.abc import Generator
from logging import Logger
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from safequery import setup_test_logging
from safequery.database import (
    DatabaseConnection,
    QueryBuilder,
    SQLAlchemyConnection,
    SQLiteConnection,
    create_database_engine,
)
from safequery.types import ParamStyle

POSTS_SCHEMA = """CREATE TABLE IF NOT EXISTS posts (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT NOT NULL,
    status      TEXT NOT NULL,
    views       INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT NOT NULL
)"""

SAMPLE_POSTS: list[dict[str, Any]] = [
    {
        "title": "Hello World",
        "status": "published",
        "views": 10,
        "created_at": "2024-01-01",
    },
    {
        "title": "Draft Ideas",
        "status": "draft",
        "views": 0,
        "created_at": "2024-01-02",
    },
    {
        "title": "Second Post",
        "status": "published",
        "views": 42,
        "created_at": "2024-01-03",
    },
    {
        "title": "Old News",
        "status": "archived",
        "views": 7,
        "created_at": "2023-12-31",
    },
]


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from safequery import get_logger

    return get_logger("test")


@pytest.fixture
def mock_connection() -> Mock:
    """Connection double recording what the builder hands over."""
    connection = Mock(spec=DatabaseConnection)
    connection.param_style = ParamStyle.QMARK
    connection.strict_conditions = False
    connection.fetch_all.return_value = []
    connection.fetch_one.return_value = None
    connection.fetch_scalar.return_value = None
    return connection


@pytest.fixture
def builder(mock_connection: Mock) -> QueryBuilder:
    """Builder on ``wp_test_users`` backed by the mock connection."""
    return QueryBuilder(mock_connection, "wp_test_users")


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path using pytest's tmp_path."""
    return tmp_path / "test.db"


def _seed(connection: DatabaseConnection) -> None:
    connection.execute(POSTS_SCHEMA)
    for post in SAMPLE_POSTS:
        connection.insert_row("posts", post)


@pytest.fixture
def sqlite_connection(temp_db_path: Path) -> Generator[SQLiteConnection, None, None]:
    """Connected SQLite connection with a seeded ``posts`` table."""
    connection = SQLiteConnection(temp_db_path)
    with connection:
        _seed(connection)
        yield connection


@pytest.fixture
def sqlalchemy_connection() -> Generator[SQLAlchemyConnection, None, None]:
    """Connected SQLAlchemy connection on in-memory SQLite, seeded."""
    engine = create_database_engine("sqlite://")
    connection = SQLAlchemyConnection(engine)
    with connection:
        _seed(connection)
        yield connection
    engine.dispose()
