"""Segment types produced by the tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SegmentKind(Enum):
    """Kinds of template segments."""

    LITERAL = "literal"
    EXPRESSION = "expression"  # {{ ... }}
    STATEMENT = "statement"  # {% ... %}
    COMMENT = "comment"  # {# ... #}


@dataclass(frozen=True, slots=True)
class Segment:
    """One contiguous slice of template source.

    ``text`` is always ``source[start:end]``; delimiters and whitespace-control
    modifiers are kept verbatim. Use ``inner`` for the content between them.

    Attributes:
        kind: Segment kind
        text: Raw source text of the segment
        start: Offset of the first character
        end: Offset one past the last character
        trim_left: A ``-`` or ``+`` modifier follows the opening delimiter
        trim_right: A ``-`` or ``+`` modifier precedes the closing delimiter
        closed: False when input ended before the closing delimiter
    """

    kind: SegmentKind
    text: str
    start: int
    end: int
    trim_left: bool = False
    trim_right: bool = False
    closed: bool = True

    @property
    def inner(self) -> str:
        """Content between the delimiters, without modifiers or padding."""
        if self.kind is SegmentKind.LITERAL:
            return self.text
        body = self.text[2:-2] if self.closed else self.text[2:]
        if self.trim_left:
            body = body[1:]
        if self.trim_right:
            body = body[:-1]
        return body.strip()

    def __repr__(self) -> str:
        return f"Segment({self.kind.name}, {self.text!r}, {self.start}:{self.end})"
