"""Folds references into one nested schema."""

from __future__ import annotations

from jinja_schema.analysis.hints import hint_for
from jinja_schema.nodes import (
    UNKNOWN,
    AccessPath,
    Array,
    Attr,
    Object,
    Scalar,
    ScalarType,
    Shape,
    Usage,
    merge_shapes,
)
from jinja_schema.schema import VariableSchema

_LEAVES: dict[Usage, Shape] = {
    Usage.STRING: Scalar(ScalarType.STRING),
    Usage.NUMBER: Scalar(ScalarType.NUMBER),
    Usage.BOOLEAN: Scalar(ScalarType.BOOLEAN),
    Usage.NULL: Scalar(ScalarType.NULL),
    Usage.ARRAY: Array(UNKNOWN),
    Usage.OBJECT: Object(),
    Usage.UNKNOWN: UNKNOWN,
}


def shape_for_path(path: AccessPath, usage: Usage) -> Shape:
    """Shape implied by one access, built from the leaf up.

    Example:
        >>> from jinja_schema.nodes import ELEMENT
        >>> shape_for_path(AccessPath("users", (ELEMENT, Attr("age"))), Usage.NUMBER)
        Array(element=Object(fields={'age': Scalar(type=<ScalarType.NUMBER: 'number'>)}))
    """
    shape = _LEAVES[usage]
    for step in reversed(path.segments):
        if isinstance(step, Attr):
            shape = Object({step.name: shape})
        elif isinstance(step.key, str):
            shape = Object({step.key: shape})
        else:
            shape = Array(shape)
    return shape


def apply_name_hints(shape: Shape, name: str | None) -> Shape:
    """Type unknown scalars from their variable or field names."""
    if isinstance(shape, Scalar):
        if shape.type is ScalarType.UNKNOWN:
            hinted = hint_for(name)
            if hinted is not ScalarType.UNKNOWN:
                return Scalar(hinted)
        return shape
    if isinstance(shape, Array):
        # Elements have no name of their own
        return Array(apply_name_hints(shape.element, None))
    return Object({key: apply_name_hints(field, key) for key, field in shape.fields.items()})


class SchemaBuilder:
    """Accumulates references into root shapes, in first-seen order."""

    def __init__(self) -> None:
        self._roots: dict[str, Shape] = {}

    def add(self, path: AccessPath, usage: Usage) -> None:
        shape = shape_for_path(path, usage)
        existing = self._roots.get(path.root)
        self._roots[path.root] = shape if existing is None else merge_shapes(existing, shape)

    def build(self, *, name_hints: bool = True) -> VariableSchema:
        roots = self._roots
        if name_hints:
            roots = {name: apply_name_hints(shape, name) for name, shape in roots.items()}
        return VariableSchema(roots)
