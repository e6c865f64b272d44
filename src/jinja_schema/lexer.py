"""Template tokenizer for jinja_schema.

Splits template source into an ordered, gap-free list of segments:
literal text, ``{{ expression }}``, ``{% statement %}`` and ``{# comment #}``.

Scanning rules:
- Quote state is tracked inside expressions and statements, so ``}}`` or
  ``%}`` inside a string literal does not end the segment.
- Brace depth is tracked inside expressions, so a dict literal's ``}}``
  does not end the segment either.
- Whitespace-control modifiers (``-``/``+``) are flagged, never stripped
  from ``text``.
- An unterminated delimiter never raises: the remainder of the input
  becomes one segment of the opened kind with ``closed=False``.
- ``{% raw %}`` bodies are emitted as one literal segment when raw blocks
  are inert (the default).

Example:
    >>> [s.kind.value for s in tokenize("Hi {{ name }}!")]
    ['literal', 'expression', 'literal']
"""

from __future__ import annotations

import logging
import re

from jinja_schema._types import Segment, SegmentKind
from jinja_schema.exceptions import Diagnostic, ErrorCode

logger = logging.getLogger(__name__)

_OPEN_RE = re.compile(r"\{[{%#]")
_ENDRAW_RE = re.compile(r"\{%[-+]?\s*endraw\s*[-+]?%\}")

_OPENERS = {
    "{{": SegmentKind.EXPRESSION,
    "{%": SegmentKind.STATEMENT,
    "{#": SegmentKind.COMMENT,
}
_CLOSERS = {
    SegmentKind.EXPRESSION: "}}",
    SegmentKind.STATEMENT: "%}",
    SegmentKind.COMMENT: "#}",
}
_UNCLOSED = {
    SegmentKind.EXPRESSION: (ErrorCode.UNCLOSED_EXPRESSION, "Unclosed expression"),
    SegmentKind.STATEMENT: (ErrorCode.UNCLOSED_STATEMENT, "Unclosed statement"),
    SegmentKind.COMMENT: (ErrorCode.UNCLOSED_COMMENT, "Unclosed comment"),
}
_MODIFIERS = "-+"


class Lexer:
    """Single-use tokenizer over one template source.

    Example:
        >>> lexer = Lexer("{{ user.name }")
        >>> segments = lexer.tokenize()
        >>> segments[0].closed
        False
        >>> lexer.diagnostics[0].code.value
        'S-LEX-003'
    """

    def __init__(self, source: str, *, raw_is_inert: bool = True) -> None:
        self._source = source
        self._raw_is_inert = raw_is_inert
        self.diagnostics: list[Diagnostic] = []

    def tokenize(self) -> list[Segment]:
        """Split the source into segments covering every character once."""
        source = self._source
        length = len(source)
        segments: list[Segment] = []
        pos = 0

        while pos < length:
            match = _OPEN_RE.search(source, pos)
            if match is None:
                segments.append(self._literal(pos, length))
                break

            start = match.start()
            if start > pos:
                segments.append(self._literal(pos, start))

            kind = _OPENERS[match.group()]
            end, closed = self._find_close(kind, match.end())
            segment = self._delimited(kind, start, end, closed)
            segments.append(segment)
            pos = end

            if not closed:
                code, message = _UNCLOSED[kind]
                self._report(code, f"{message}, reading to end of input", start)
            elif (
                self._raw_is_inert
                and kind is SegmentKind.STATEMENT
                and segment.inner == "raw"
            ):
                pos = self._consume_raw_body(pos, segments)

        return segments

    def _find_close(self, kind: SegmentKind, pos: int) -> tuple[int, bool]:
        """Return (end offset, closed) for a segment whose body starts at pos."""
        source = self._source
        closer = _CLOSERS[kind]

        if kind is SegmentKind.COMMENT:
            index = source.find(closer, pos)
            if index == -1:
                return len(source), False
            return index + 2, True

        track_braces = kind is SegmentKind.EXPRESSION
        quote: str | None = None
        depth = 0
        i = pos
        length = len(source)
        while i < length:
            char = source[i]
            if quote is not None:
                if char == "\\":
                    i += 2
                    continue
                if char == quote:
                    quote = None
            elif char in "'\"":
                quote = char
            elif depth == 0 and source.startswith(closer, i):
                return i + 2, True
            elif track_braces and char == "{":
                depth += 1
            elif track_braces and char == "}" and depth > 0:
                depth -= 1
            i += 1

        # A stray quote or brace must not swallow the rest of the document
        index = source.find(closer, pos)
        if index != -1:
            logger.debug("Unbalanced quote or brace at offset %d; closing at first %r", pos, closer)
            return index + 2, True
        return length, False

    def _consume_raw_body(self, pos: int, segments: list[Segment]) -> int:
        """Emit the body of a raw block as literal text plus its endraw tag."""
        match = _ENDRAW_RE.search(self._source, pos)
        if match is None:
            if pos < len(self._source):
                segments.append(self._literal(pos, len(self._source)))
            self._report(ErrorCode.UNCLOSED_BLOCK, "Raw block is never closed", pos)
            return len(self._source)

        if match.start() > pos:
            segments.append(self._literal(pos, match.start()))
        segments.append(self._delimited(SegmentKind.STATEMENT, match.start(), match.end(), True))
        return match.end()

    def _literal(self, start: int, end: int) -> Segment:
        return Segment(SegmentKind.LITERAL, self._source[start:end], start, end)

    def _delimited(self, kind: SegmentKind, start: int, end: int, closed: bool) -> Segment:
        text = self._source[start:end]
        trim_left = len(text) > 2 and text[2] in _MODIFIERS
        # The right modifier must not be the same character as the left one
        min_length = 6 if trim_left else 5
        trim_right = closed and len(text) >= min_length and text[-3] in _MODIFIERS
        return Segment(
            kind=kind,
            text=text,
            start=start,
            end=end,
            trim_left=trim_left,
            trim_right=trim_right,
            closed=closed,
        )

    def _report(self, code: ErrorCode, message: str, offset: int) -> None:
        logger.debug("%s at offset %d", message, offset)
        self.diagnostics.append(Diagnostic(code, message, offset))


def tokenize(source: str, *, raw_is_inert: bool = True) -> list[Segment]:
    """Tokenize template source into segments.

    Args:
        source: Template text
        raw_is_inert: Emit ``{% raw %}`` bodies as literal text

    Returns:
        Segments partitioning the source, in order
    """
    return Lexer(source, raw_is_inert=raw_is_inert).tokenize()
