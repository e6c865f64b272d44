"""Exceptions and diagnostics for jinja_schema.

Malformed template syntax never raises. The engine degrades to a partial
schema and records what it skipped as Diagnostic values on the analysis
result. Exceptions are reserved for caller mistakes outside the template
text itself.

Exception Hierarchy:
SchemaError (base)
└── LineRangeError            # Invalid 1-based line range (also a ValueError)

Diagnostic codes:
    S-LEX-xxx  tokenizer degradations (unclosed delimiters)
    S-PAR-xxx  parser degradations (unknown or malformed tags, nesting limits)
    S-SCO-xxx  scope degradations (unmatched or unclosed blocks)

Example:
    ```
    S-LEX-003: Unclosed expression, reading to end of input (offset 6)
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Searchable codes for recorded degradations.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: LEX (tokenizer), PAR (statement and expression parsers), SCO (scope tracker)
    """

    # Tokenizer (S-LEX-xxx)
    UNCLOSED_STATEMENT = "S-LEX-001"
    UNCLOSED_COMMENT = "S-LEX-002"
    UNCLOSED_EXPRESSION = "S-LEX-003"

    # Parsers (S-PAR-xxx)
    UNKNOWN_TAG = "S-PAR-001"
    MALFORMED_STATEMENT = "S-PAR-002"
    NESTING_TOO_DEEP = "S-PAR-003"

    # Scope tracker (S-SCO-xxx)
    UNMATCHED_END_TAG = "S-SCO-001"
    UNCLOSED_BLOCK = "S-SCO-002"

    @property
    def category(self) -> str:
        """Category name (e.g., 'lexer', 'parser', 'scope')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "SCO": "scope",
        }.get(prefix, "unknown")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A recoverable problem found while analyzing a template.

    Attributes:
        code: Searchable error code
        message: Human-readable description
        offset: Character offset into the analyzed source
    """

    code: ErrorCode
    message: str
    offset: int

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message} (offset {self.offset})"


class SchemaError(Exception):
    """Base class for jinja_schema errors raised to callers."""


class LineRangeError(SchemaError, ValueError):
    """A requested line range does not fit the source text."""

    def __init__(self, start: int, end: int | None, line_count: int) -> None:
        self.start = start
        self.end = end
        self.line_count = line_count
        shown = f"{start}:{end}" if end is not None else f"{start}:"
        super().__init__(
            f"Invalid line range {shown} for source with {line_count} line(s); "
            "lines are 1-based and inclusive"
        )
