"""Node types for jinja_schema.

Statement nodes come from the statement parser, paths and references from
the expression parser, and shape nodes from the schema builder. All nodes
are frozen dataclasses.
"""

from jinja_schema.nodes.paths import (
    ELEMENT,
    AccessPath,
    Attr,
    Index,
    PathStep,
    Reference,
    Usage,
)
from jinja_schema.nodes.shapes import (
    UNKNOWN,
    Array,
    Object,
    Scalar,
    ScalarType,
    Shape,
    merge_shapes,
    scalar_for,
)
from jinja_schema.nodes.statements import Role, Statement, Tag

__all__ = [
    "ELEMENT",
    "UNKNOWN",
    "AccessPath",
    "Array",
    "Attr",
    "Index",
    "Object",
    "PathStep",
    "Reference",
    "Role",
    "Scalar",
    "ScalarType",
    "Shape",
    "Statement",
    "Tag",
    "Usage",
    "merge_shapes",
    "scalar_for",
]
