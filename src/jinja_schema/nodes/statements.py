"""Classified statement nodes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Tag(Enum):
    """Closed set of statement kinds."""

    FOR = "for"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    SET = "set"
    WITH = "with"
    MACRO = "macro"
    CALL = "call"
    IMPORT = "import"
    FROM = "from"
    BLOCK = "block"
    EXTENDS = "extends"
    INCLUDE = "include"
    RAW = "raw"
    AUTOESCAPE = "autoescape"
    FILTER = "filter"
    TRANS = "trans"
    DO = "do"
    BREAK = "break"
    CONTINUE = "continue"
    END = "end"  # any endX tag; the closed keyword is in Statement.name
    UNKNOWN = "unknown"


class Role(Enum):
    """What a sub-expression does inside its statement."""

    ITERABLE = "iterable"
    CONDITION = "condition"
    VALUE = "value"
    DEFAULT = "default"
    CALL = "call"
    EXPRESSION = "expression"
    TARGET = "target"


@dataclass(frozen=True, slots=True)
class Statement:
    """A classified ``{% ... %}`` segment.

    Attributes:
        tag: Statement kind
        raw: Inner statement text
        subexpressions: Role-tagged expression strings, in source order
        targets: Names this statement binds
        name: Block or macro name, or the keyword an end tag closes
        params: Macro or call parameter names
        block_form: True for ``{% set x %}...{% endset %}``
        template: Literal template path for cross-file tags
        malformed: True when only part of the statement could be read
    """

    tag: Tag
    raw: str
    subexpressions: tuple[tuple[Role, str], ...] = ()
    targets: tuple[str, ...] = ()
    name: str | None = None
    params: tuple[str, ...] = ()
    block_form: bool = False
    template: str | None = None
    malformed: bool = False

    def expressions(self, role: Role) -> list[str]:
        """Sub-expression strings with the given role."""
        return [text for r, text in self.subexpressions if r is role]
