"""Exceptions raised by the query builder and connections."""


class SafeQueryError(Exception):
    """Base exception for safequery errors."""

    pass


class InvalidIdentifierError(SafeQueryError, ValueError):
    """Raised when a table or column name fails identifier validation."""

    pass


class InvalidOperatorError(SafeQueryError, ValueError):
    """Raised when a WHERE operator is not in the allowed set."""

    pass


class InvalidBindingError(SafeQueryError, TypeError):
    """Raised when a non-scalar value is bound to a placeholder."""

    pass


class UnsupportedConditionError(SafeQueryError):
    """Raised when update/delete cannot express a WHERE clause as a keyed map."""

    pass


class NotConnectedError(SafeQueryError, RuntimeError):
    """Raised when a connection is used before connect()."""

    pass
