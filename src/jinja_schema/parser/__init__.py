"""Statement and expression parsers."""

from jinja_schema.parser.expressions import (
    ExpressionParser,
    ParsedExpression,
    lex,
    parse_expression,
)
from jinja_schema.parser.statements import StatementParser, parse_statement

__all__ = [
    "ExpressionParser",
    "ParsedExpression",
    "StatementParser",
    "lex",
    "parse_expression",
    "parse_statement",
]
