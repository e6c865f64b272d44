"""Inferred shape nodes.

A shape is one of three immutable node kinds:

- ``Scalar``: leaf value with a ``ScalarType``
- ``Array``: homogeneous list with one element shape
- ``Object``: mapping with ordered named fields

``merge_shapes`` folds two shapes for the same path into one. Structural
shapes outrank scalars, scalars outrank ``unknown``, and the first concrete
signal always wins, so merging is deterministic in source order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ScalarType(Enum):
    """Leaf value types."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    UNKNOWN = "unknown"


_PLACEHOLDERS: dict[ScalarType, Any] = {
    ScalarType.STRING: "",
    ScalarType.NUMBER: 0,
    ScalarType.BOOLEAN: False,
    ScalarType.NULL: None,
    ScalarType.UNKNOWN: "",
}


@dataclass(frozen=True, slots=True)
class Scalar:
    """Leaf value."""

    type: ScalarType = ScalarType.UNKNOWN

    def placeholder(self) -> Any:
        return _PLACEHOLDERS[self.type]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value}

    def describe(self) -> str:
        return self.type.value


@dataclass(frozen=True, slots=True)
class Array:
    """List whose items all share ``element``."""

    element: Shape = field(default_factory=Scalar)

    def placeholder(self) -> list[Any]:
        return [self.element.placeholder()]

    def to_dict(self) -> dict[str, Any]:
        return {"type": "array", "element": self.element.to_dict()}

    def describe(self) -> str:
        return f"array of {self.element.describe()}"


@dataclass(frozen=True, slots=True)
class Object:
    """Mapping with fields in first-seen order.

    ``fields`` is never mutated after construction; merges build new objects.
    """

    fields: dict[str, Shape] = field(default_factory=dict)

    def placeholder(self) -> dict[str, Any]:
        return {name: shape.placeholder() for name, shape in self.fields.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "object",
            "fields": {name: shape.to_dict() for name, shape in self.fields.items()},
        }

    def describe(self) -> str:
        count = len(self.fields)
        if count == 0:
            return "object"
        return f"object ({count} field{'s' if count != 1 else ''})"


Shape = Scalar | Array | Object

UNKNOWN = Scalar()


def scalar_for(type_name: str) -> Scalar:
    """Scalar for a ScalarType value such as ``"number"``."""
    return Scalar(ScalarType(type_name))


def merge_shapes(first: Shape, second: Shape) -> Shape:
    """Fold ``second`` into ``first``.

    Rules:
        - object + object: field union, recursively merged, first-seen order
        - array + array: element shapes merged
        - structural + scalar: the structural shape
        - two different structural kinds: ``first``
        - scalar + scalar: ``first`` unless it is unknown
    """
    if isinstance(first, Object):
        if isinstance(second, Object):
            if not second.fields:
                return first
            fields = dict(first.fields)
            for name, shape in second.fields.items():
                existing = fields.get(name)
                fields[name] = shape if existing is None else merge_shapes(existing, shape)
            return Object(fields)
        return first

    if isinstance(first, Array):
        if isinstance(second, Array):
            return Array(merge_shapes(first.element, second.element))
        return first

    # first is a scalar
    if isinstance(second, (Array, Object)):
        return second
    if first.type is ScalarType.UNKNOWN:
        return second
    return first
