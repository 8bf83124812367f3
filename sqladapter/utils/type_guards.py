"""Type guard functions for runtime type checking in sqladapter.

This module provides type-safe runtime checks that help the type checker
understand type narrowing, replacing defensive hasattr() and duck typing patterns.
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing_extensions import TypeGuard

    from sqladapter.expressions import RawExpression
    from sqladapter.protocols import Cursor
    from sqladapter.statement import Statement

__all__ = (
    "is_column_list",
    "is_cursor",
    "is_mapping_row",
    "is_raw_expression",
    "is_sequence_parameters",
    "is_statement",
)

_CURSOR_METHODS = ("execute", "fetchone", "fetchall", "close")


def is_raw_expression(obj: Any) -> "TypeGuard[RawExpression]":
    """Check if an object is a RawExpression.

    Args:
        obj: The object to check

    Returns:
        True if the object is a RawExpression, False otherwise
    """
    from sqladapter.expressions import RawExpression

    return isinstance(obj, RawExpression)


def is_statement(obj: Any) -> "TypeGuard[Statement]":
    """Check if an object is a sqladapter Statement."""
    from sqladapter.statement import Statement

    return isinstance(obj, Statement)


def is_cursor(obj: Any) -> "TypeGuard[Cursor]":
    """Check if an object implements the DB-API cursor protocol.

    Attributes are resolved dynamically, so driver cursors built on
    ``__getattr__`` proxies are recognized too.
    """
    return all(callable(getattr(obj, method, None)) for method in _CURSOR_METHODS)


def is_mapping_row(row: Any) -> "TypeGuard[Mapping[str, Any]]":
    """Check if a builder row is the associative (column -> value) form."""
    return isinstance(row, Mapping)


def is_column_list(row: Any) -> "TypeGuard[Sequence[Any]]":
    """Check if a builder row is a plain list of column names.

    Strings and bytes are sequences too, but never a column list.
    """
    return isinstance(row, Sequence) and not isinstance(row, (str, bytes, bytearray))


def is_sequence_parameters(obj: Any) -> "TypeGuard[Sequence[Any]]":
    """Check if an execute() argument is an explicit parameter list."""
    return isinstance(obj, (list, tuple))
