from collections.abc import Mapping, Sequence
from typing import Any, Union

from typing_extensions import TypeAlias

__all__ = (
    "ColumnList",
    "DictRow",
    "Row",
    "StatementParameters",
)

DictRow: TypeAlias = "dict[str, Any]"
"""A fetched row, keyed by column name."""

Row: TypeAlias = "Union[Mapping[str, Any], Sequence[str]]"
"""Builder input: column -> value mapping, or a list of column names."""

ColumnList: TypeAlias = "Sequence[str]"

StatementParameters: TypeAlias = "Union[list[Any], dict[str, Any]]"
"""Normalized parameters handed to the driver."""
