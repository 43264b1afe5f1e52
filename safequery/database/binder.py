"""Identifier validation and positional parameter binding.

Every raw string that becomes part of SQL text passes through
``validate_identifier`` / ``validate_column``; every value travels through a
``Binder`` and reaches the driver as a bound parameter, never as text.
"""

import re
from typing import Any

from safequery.exceptions import InvalidBindingError, InvalidIdentifierError
from safequery.types import BindingValue, DatabaseParamType, ParamStyle

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
WILDCARD = "*"
SCALAR_TYPES = (str, int, float, bool)


def validate_identifier(name: str, kind: str = "identifier") -> str:
    """Validate a (possibly dotted) SQL identifier.

    Args:
        name: Table or column name, e.g. ``posts`` or ``blog.posts``
        kind: Label used in the error message

    Returns:
        The name, unchanged

    Raises:
        InvalidIdentifierError: If any dot-separated segment fails the pattern
    """
    if not isinstance(name, str):
        raise InvalidIdentifierError(
            f"Invalid {kind} name: {name!r}. Must be a string"
        )

    for segment in name.split("."):
        if not IDENTIFIER_PATTERN.fullmatch(segment):
            raise InvalidIdentifierError(
                f"Invalid {kind} name: {name!r}. "
                f"Must match pattern: {IDENTIFIER_PATTERN.pattern}"
            )
    return name


def validate_column(name: str, allow_wildcard: bool = False) -> str:
    """Validate a column name, optionally accepting ``*`` or ``table.*``."""
    if allow_wildcard and isinstance(name, str):
        if name == WILDCARD:
            return name
        qualifier, dot, last = name.rpartition(".")
        if dot and last == WILDCARD:
            validate_identifier(qualifier, "column")
            return name
    return validate_identifier(name, "column")


def validate_value(value: Any) -> BindingValue:
    """Accept only scalar values (str, int, float, bool, None).

    Raises:
        InvalidBindingError: For containers, bytes, objects and anything else
    """
    if value is None or isinstance(value, SCALAR_TYPES):
        return value
    raise InvalidBindingError(
        f"Cannot bind value of type {type(value).__name__}: "
        "only str, int, float, bool and None are supported"
    )


def placeholder_for(style: ParamStyle, index: int) -> str:
    """Render the placeholder for binding ``index`` in the given style."""
    if style == ParamStyle.QMARK:
        return "?"
    if style == ParamStyle.FORMAT:
        return "%s"
    return f":p{index}"


class Binder:
    """Append-only list of bound values for one statement."""

    def __init__(self, style: ParamStyle = ParamStyle.QMARK) -> None:
        self.style = ParamStyle(style)
        self._values: list[BindingValue] = []

    def bind(self, value: Any) -> int:
        """Append a value and return its zero-based position."""
        self._values.append(validate_value(value))
        return len(self._values) - 1

    def placeholder(self, index: int) -> str:
        """Placeholder text for an already bound index."""
        if not 0 <= index < len(self._values):
            raise IndexError(f"Binding index {index} out of range")
        return placeholder_for(self.style, index)

    def value(self, index: int) -> BindingValue:
        """Value bound at ``index``."""
        return self._values[index]

    @property
    def values(self) -> list[BindingValue]:
        """Copy of the bound values in binding order."""
        return list(self._values)

    def params(self) -> DatabaseParamType:
        """Bound values shaped for the driver's parameter style."""
        if self.style == ParamStyle.NAMED:
            return {f"p{index}": value for index, value in enumerate(self._values)}
        return list(self._values)

    def copy(self) -> "Binder":
        """Independent binder holding the same values."""
        clone = Binder(self.style)
        clone._values = list(self._values)
        return clone

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Binder(style={self.style.value!r}, values={self._values!r})"
