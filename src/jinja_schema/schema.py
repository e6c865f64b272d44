"""The extracted variable schema.

``VariableSchema`` is a read-only mapping from root variable name to its
inferred shape, in first-seen order. Besides serialization it answers the
path questions an editor asks while a user types: what is at
``user.address``, which keys sit next to ``user.name``, and how to describe
a value in one word.

Example:
    >>> from jinja_schema import extract_schema
    >>> schema = extract_schema("{% for u in users %}{{ u.name }}{% endfor %}")
    >>> schema.to_sample()
    {'users': [{'name': ''}]}
    >>> schema.describe("users")
    'array of object (1 field)'
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from typing import Any

from jinja_schema.nodes import Array, Object, Shape

_PATH_STEP_RE = re.compile(r"\[([^\]]*)\]|([^.\[\]]+)")


def _path_steps(path: str) -> list[str]:
    """Split ``users[0].name`` into ``['users', '0', 'name']``."""
    steps = []
    for match in _PATH_STEP_RE.finditer(path):
        index, name = match.groups()
        if index is not None:
            steps.append(index.strip().strip("'\""))
        else:
            steps.append(name.strip())
    return [step for step in steps if step]


class VariableSchema(Mapping[str, Shape]):
    """Read-only mapping of root variable names to shapes."""

    __slots__ = ("_roots",)

    def __init__(self, roots: Mapping[str, Shape] | None = None) -> None:
        self._roots: dict[str, Shape] = dict(roots or {})

    def __getitem__(self, name: str) -> Shape:
        return self._roots[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._roots)

    def __len__(self) -> int:
        return len(self._roots)

    def __repr__(self) -> str:
        return f"VariableSchema({', '.join(self._roots)})"

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_sample(self) -> dict[str, Any]:
        """Placeholder data for every variable.

        Scalars become ``""``, ``0``, ``False`` or ``None`` (unknown is
        ``""``), arrays a one-element list, objects a dict of their fields.
        """
        return {name: shape.placeholder() for name, shape in self._roots.items()}

    def to_dict(self) -> dict[str, Any]:
        """Shape description of every variable, JSON-ready."""
        return {name: shape.to_dict() for name, shape in self._roots.items()}

    def to_json(self, indent: int | None = 2, *, shapes: bool = False) -> str:
        """Serialize the sample (or, with ``shapes=True``, the shapes) as JSON."""
        data = self.to_dict() if shapes else self.to_sample()
        return json.dumps(data, indent=indent)

    # =========================================================================
    # Path queries
    # =========================================================================

    def lookup(self, path: str) -> Shape | None:
        """Shape at a dotted path, or None when the path is not in the schema.

        Array levels are stepped through transparently, so ``users.name``
        and ``users[0].name`` both reach the element field.
        """
        steps = _path_steps(path)
        if not steps:
            return None
        shape: Shape | None = self._roots.get(steps[0])
        for step in steps[1:]:
            if shape is None:
                return None
            if isinstance(shape, Array):
                if step.lstrip("-").isdigit() or step == "*":
                    shape = shape.element
                    continue
                shape = shape.element
            shape = shape.fields.get(step) if isinstance(shape, Object) else None
        return shape

    def children(self, path: str = "") -> list[str]:
        """Keys directly under ``path`` (root keys for the empty path)."""
        if not path.strip():
            return list(self._roots)
        shape = self.lookup(path)
        while isinstance(shape, Array):
            shape = shape.element
        if isinstance(shape, Object):
            return list(shape.fields)
        return []

    def siblings(self, path: str) -> list[str]:
        """Keys alongside the last step of ``path``, excluding it."""
        steps = _path_steps(path)
        if not steps:
            return []
        parent = ".".join(steps[:-1])
        return [key for key in self.children(parent) if key != steps[-1]]

    def describe(self, path: str) -> str | None:
        """Short type description, e.g. ``"number"`` or ``"array of string"``."""
        shape = self.lookup(path)
        return shape.describe() if shape is not None else None
