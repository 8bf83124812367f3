"""Tagged SQL values.

Every value that flows into a generated statement is either a
:class:`RawExpression`, embedded verbatim, or a :class:`BoundValue`, sent to
the driver as a bound parameter.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Union

from typing_extensions import TypeAlias

__all__ = ("BoundValue", "RawExpression", "SqlValue", "bound_parameters", "to_sql_value")


@dataclass(frozen=True)
class RawExpression:
    """Literal SQL text that must not be quoted or bound.

    Example:
        >>> adapter.update("users", {"visits": RawExpression("visits + 1")}, "id = ?", 7)
    """

    text: str
    is_literal: ClassVar[bool] = True

    def __str__(self) -> str:
        return self.text

    def render(self, placeholder: str) -> str:
        return self.text


@dataclass(frozen=True)
class BoundValue:
    """An ordinary value sent to the driver as a parameter."""

    value: Any
    is_literal: ClassVar[bool] = False

    def render(self, placeholder: str) -> str:
        return placeholder


SqlValue: TypeAlias = Union[RawExpression, BoundValue]


def to_sql_value(value: Any) -> SqlValue:
    """Tag a plain Python value, leaving already tagged values untouched."""
    if isinstance(value, (RawExpression, BoundValue)):
        return value
    return BoundValue(value)


def bound_parameters(values: "list[SqlValue]") -> "list[Any]":
    """Return the parameters to bind for ``values``, in placeholder order."""
    return [value.value for value in values if not value.is_literal]  # type: ignore[union-attr]
