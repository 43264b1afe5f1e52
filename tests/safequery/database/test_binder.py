"""Tests for identifier validation and parameter binding."""

from datetime import datetime

import pytest

from safequery.database.binder import (
    IDENTIFIER_PATTERN,
    Binder,
    placeholder_for,
    validate_column,
    validate_identifier,
    validate_value,
)
from safequery.exceptions import InvalidBindingError, InvalidIdentifierError
from safequery.types import ParamStyle


@pytest.mark.parametrize(
    "name",
    ["posts", "_private", "wp_test_users", "Users2", "blog.posts", "a.b.c"],
)
def test_validate_identifier_accepts_valid_names(name: str) -> None:
    """Test valid single and dotted identifiers pass unchanged."""
    assert validate_identifier(name) == name


@pytest.mark.parametrize(
    "name",
    [
        "user table",
        "users;DROP TABLE users",
        "users'",
        'users"',
        "user-data",
        "1users",
        "blog..posts",
        ".posts",
        "posts.",
        "",
        "posts\n",
        "posts`",
    ],
)
def test_validate_identifier_rejects_invalid_names(name: str) -> None:
    """Test identifiers with disallowed characters or empty segments fail."""
    with pytest.raises(InvalidIdentifierError):
        validate_identifier(name)


def test_validate_identifier_error_message() -> None:
    """Test the error names the kind, the full string and the pattern."""
    with pytest.raises(InvalidIdentifierError) as exc_info:
        validate_identifier("blog.1posts", "table")

    message = str(exc_info.value)
    assert "Invalid table name" in message
    assert "blog.1posts" in message
    assert IDENTIFIER_PATTERN.pattern in message


def test_validate_identifier_rejects_non_string() -> None:
    """Test non-string identifiers fail validation."""
    with pytest.raises(InvalidIdentifierError):
        validate_identifier(42)  # type: ignore[arg-type]


def test_invalid_identifier_is_value_error() -> None:
    """Test callers catching ValueError still see identifier failures."""
    with pytest.raises(ValueError):
        validate_identifier("bad name")


def test_validate_column_wildcards() -> None:
    """Test wildcard columns only pass when allowed."""
    assert validate_column("*", allow_wildcard=True) == "*"
    assert validate_column("posts.*", allow_wildcard=True) == "posts.*"

    with pytest.raises(InvalidIdentifierError):
        validate_column("*")
    with pytest.raises(InvalidIdentifierError):
        validate_column("bad table.*", allow_wildcard=True)
    with pytest.raises(InvalidIdentifierError):
        validate_column("COUNT(*)", allow_wildcard=True)


@pytest.mark.parametrize("value", ["text", 0, -3, 1.5, True, False, None])
def test_validate_value_accepts_scalars(value: object) -> None:
    """Test every scalar kind passes through unchanged."""
    assert validate_value(value) is value


@pytest.mark.parametrize(
    "value",
    [[1, 2], {"a": 1}, (1,), {1}, b"bytes", datetime(2024, 1, 1), object()],
)
def test_validate_value_rejects_composites(value: object) -> None:
    """Test composite and structured values are rejected."""
    with pytest.raises(InvalidBindingError):
        validate_value(value)


def test_binder_bind_returns_positions() -> None:
    """Test bind appends and returns zero-based indices."""
    binder = Binder()

    assert binder.bind("a") == 0
    assert binder.bind(2) == 1
    assert binder.bind(None) == 2
    assert binder.values == ["a", 2, None]
    assert len(binder) == 3
    assert binder.value(1) == 2


def test_binder_rejects_composite_without_appending() -> None:
    """Test a rejected value leaves the binding list untouched."""
    binder = Binder()
    binder.bind(1)

    with pytest.raises(InvalidBindingError):
        binder.bind([1, 2])

    assert binder.values == [1]


def test_binder_values_is_a_copy() -> None:
    """Test mutating the returned list does not change the binder."""
    binder = Binder()
    binder.bind(1)

    binder.values.append(2)

    assert binder.values == [1]


def test_binder_copy_is_independent() -> None:
    """Test copies share history but not future bindings."""
    binder = Binder()
    binder.bind("x")

    clone = binder.copy()
    clone.bind("y")

    assert binder.values == ["x"]
    assert clone.values == ["x", "y"]
    assert clone.style == binder.style


@pytest.mark.parametrize(
    "style, expected",
    [
        (ParamStyle.QMARK, ["?", "?"]),
        (ParamStyle.FORMAT, ["%s", "%s"]),
        (ParamStyle.NAMED, [":p0", ":p1"]),
    ],
)
def test_binder_placeholders(style: ParamStyle, expected: list[str]) -> None:
    """Test placeholder text for each parameter style."""
    binder = Binder(style)
    first = binder.bind("a")
    second = binder.bind("b")

    assert [binder.placeholder(first), binder.placeholder(second)] == expected


def test_binder_placeholder_requires_bound_index() -> None:
    """Test placeholders can only be rendered for bound values."""
    binder = Binder()
    binder.bind(1)

    with pytest.raises(IndexError):
        binder.placeholder(1)


def test_binder_params_shape() -> None:
    """Test params are a list for positional styles and a dict for named."""
    positional = Binder(ParamStyle.QMARK)
    named = Binder(ParamStyle.NAMED)
    for value in ("a", 1):
        positional.bind(value)
        named.bind(value)

    assert positional.params() == ["a", 1]
    assert named.params() == {"p0": "a", "p1": 1}


def test_placeholder_for_accepts_string_style() -> None:
    """Test Binder accepts the style's string value."""
    assert Binder("named").style == ParamStyle.NAMED  # type: ignore[arg-type]
    assert placeholder_for(ParamStyle.NAMED, 7) == ":p7"
