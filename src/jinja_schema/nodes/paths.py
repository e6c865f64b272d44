"""Access paths and usage-tagged references."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Usage(Enum):
    """Shape a reference's usage implies for the value it names."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Attr:
    """``.name`` continuation."""

    name: str

    def __str__(self) -> str:
        return f".{self.name}"


@dataclass(frozen=True, slots=True)
class Index:
    """``[key]`` continuation.

    ``key`` is an int for a literal array index, a str for a literal
    mapping key, and None for a dynamic index or any element.
    """

    key: int | str | None = None

    def __str__(self) -> str:
        if self.key is None:
            return "[*]"
        return f"[{self.key!r}]"


PathStep = Attr | Index

ELEMENT = Index()


@dataclass(frozen=True, slots=True)
class AccessPath:
    """A root variable name followed by attribute and index steps.

    Example:
        >>> str(AccessPath("users", (ELEMENT, Attr("name"))))
        'users[*].name'
    """

    root: str
    segments: tuple[PathStep, ...] = ()

    def child(self, step: PathStep) -> AccessPath:
        return AccessPath(self.root, (*self.segments, step))

    def extend(self, segments: tuple[PathStep, ...]) -> AccessPath:
        if not segments:
            return self
        return AccessPath(self.root, self.segments + segments)

    def __str__(self) -> str:
        return self.root + "".join(str(s) for s in self.segments)


@dataclass(frozen=True, slots=True)
class Reference:
    """One free-variable access found in an expression.

    Attributes:
        path: The accessed path
        usage: Shape implied for the value at the end of the path
        offset: Position of the root name within the expression text
    """

    path: AccessPath
    usage: Usage = Usage.UNKNOWN
    offset: int = 0
