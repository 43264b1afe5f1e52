"""Tests for the SQLAlchemy engine-backed connection."""

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from safequery.database import SQLAlchemyConnection, create_database_engine
from safequery.exceptions import NotConnectedError
from safequery.types import ParamStyle


def test_param_style_is_named(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test builders from this connection render named placeholders."""
    builder = sqlalchemy_connection.table("posts").where("status", "draft").limit(1)

    assert sqlalchemy_connection.param_style == ParamStyle.NAMED
    assert builder.to_sql() == "SELECT * FROM posts WHERE status = :p0 LIMIT :p1"


def test_not_connected_raises() -> None:
    """Test using the connection before connect() fails loudly."""
    connection = SQLAlchemyConnection(create_database_engine("sqlite://"))

    assert not connection.is_connected
    with pytest.raises(NotConnectedError):
        connection.fetch_scalar("SELECT 1")
    with pytest.raises(NotConnectedError):
        connection.driver


def test_driver_exposes_raw_connection(
    sqlalchemy_connection: SQLAlchemyConnection,
) -> None:
    """Test the checked-out SQLAlchemy connection is available."""
    driver = sqlalchemy_connection.driver

    assert isinstance(driver, Connection)
    assert driver.execute(text("SELECT COUNT(*) FROM posts")).scalar() == 4


def test_fetch_methods(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test fetches accept positional lists and dicts."""
    rows = sqlalchemy_connection.fetch_all(
        "SELECT title FROM posts WHERE status = :p0 ORDER BY id", ["published"]
    )
    assert rows == [{"title": "Hello World"}, {"title": "Second Post"}]

    row = sqlalchemy_connection.fetch_one(
        "SELECT title FROM posts WHERE id = :post_id", {"post_id": 4}
    )
    assert row == {"title": "Old News"}

    assert sqlalchemy_connection.fetch_one("SELECT * FROM posts WHERE id = 99") is None
    assert sqlalchemy_connection.fetch_scalar("SELECT COUNT(*) FROM posts") == 4


def test_fetch_errors_propagate(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test a failing SELECT raises and leaves the connection usable."""
    with pytest.raises(SQLAlchemyError):
        sqlalchemy_connection.fetch_all("SELECT * FROM missing_table")

    assert sqlalchemy_connection.fetch_scalar("SELECT COUNT(*) FROM posts") == 4


def test_write_primitives(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test insert/update/delete primitives and the failure sentinel."""
    new_id = sqlalchemy_connection.insert_row(
        "posts", {"title": "New", "status": "draft", "created_at": "2024-02-01"}
    )
    assert new_id == 5

    assert sqlalchemy_connection.update_rows("posts", {"views": 1}, {"id": 5}) == 1
    assert sqlalchemy_connection.delete_rows("posts", {"status": "draft"}) == 2
    assert sqlalchemy_connection.insert_row("posts", {"title": "Broken"}) is None
    assert sqlalchemy_connection.last_error


def test_builder_round_trip(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test the builder end to end over SQLAlchemy."""
    posts = sqlalchemy_connection.table("posts")

    rows = (
        posts.select("id", "title")
        .where("status", "published")
        .where_in("id", [1, 2, 3])
        .order_by("created_at", "DESC")
        .limit(5)
        .get()
    )

    assert rows == [
        {"id": 3, "title": "Second Post"},
        {"id": 1, "title": "Hello World"},
    ]
    assert posts.count() == 2


def test_transaction_rollback(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test rollback discards writes made inside the transaction."""
    with pytest.raises(ValueError):
        with sqlalchemy_connection.transaction():
            sqlalchemy_connection.table("posts").where("status", "draft").delete()
            raise ValueError("abort")

    assert sqlalchemy_connection.table("posts").count() == 4


def test_transaction_commit(sqlalchemy_connection: SQLAlchemyConnection) -> None:
    """Test commit keeps writes made inside the transaction."""
    with sqlalchemy_connection.transaction():
        sqlalchemy_connection.table("posts").where("id", 1).update({"views": 100})

    first = sqlalchemy_connection.table("posts").where("id", 1).first()
    assert first is not None
    assert first["views"] == 100
