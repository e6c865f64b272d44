"""Expression analysis for jinja_schema.

Extracts free-variable access paths from one expression string and tags
each with the usage its surroundings imply. This is deliberately not a
full expression grammar: the text is lexed into tokens, split on top-level
commas and ternaries, and then read as a flat chain of operands joined by
binary operators.

Each operand is:
    [not | -] primary postfix*

where primary is a name, a literal, a parenthesized group, or a list/dict
literal, and postfix is ``.attr``, ``[index]``, ``(args)``, ``|filter`` or
``is [not] test``.

Usage for an operand's path is decided in this order:
    1. Its own postfix signals (slice, built-in method, first non-neutral
       filter, test).
    2. Neighbouring binary operators (comparison and arithmetic → number,
       ``~`` → string, equality against a literal → that literal's type).
    3. ``not`` → boolean, unary minus → number, then ``and``/``or`` → boolean.
    4. The statement role, for a sole operand (iterable → array,
       condition → boolean).

Example:
    >>> parsed = parse_expression("user.age > 18 and user.name")
    >>> [(str(r.path), r.usage.value) for r in parsed.references]
    [('user.age', 'number'), ('user.name', 'boolean')]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from jinja_schema.nodes import (
    ELEMENT,
    AccessPath,
    Attr,
    Index,
    Reference,
    Role,
    Usage,
)
from jinja_schema.utils.constants import (
    ARITHMETIC_OPERATORS,
    ARRAY_FILTERS,
    ARRAY_METHODS,
    ARRAY_TESTS,
    BINARY_OPERATORS,
    BOOLEAN_LITERALS,
    BOOLEAN_OPERATORS,
    BOOLEAN_TESTS,
    BUILTIN_METHODS,
    COMPARISON_OPERATORS,
    ELEMENT_PRESERVING_FILTERS,
    EQUALITY_OPERATORS,
    GLOBAL_NAMES,
    KEYWORDS,
    NEUTRAL_FILTERS,
    NONE_LITERALS,
    NUMBER_FILTERS,
    NUMBER_TESTS,
    OBJECT_FILTERS,
    OBJECT_METHODS,
    OBJECT_TESTS,
    STRING_FILTERS,
    STRING_METHODS,
    STRING_TESTS,
)

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    | (?P<badstring>['"].*)
    | (?P<number>\d[\d_]*(?:\.\d+)?(?:[eE][+-]?\d+)?)
    | (?P<name>[A-Za-z_]\w*)
    | (?P<op>\*\*|//|==|!=|>=|<=|[-+*/%~|.,:()\[\]{}<>=!?])
    """,
    re.VERBOSE | re.DOTALL,
)

# Deeper nesting is skipped and reported on the result
MAX_EXPRESSION_DEPTH = 64

# Field standing for every entry of a mapping iterated with .items() or .values()
SAMPLE_MAPPING_KEY = "key1"

_OPENERS = {"(": ")", "[": "]", "{": "}"}

_LITERAL_USAGE = {
    "string": Usage.STRING,
    "number": Usage.NUMBER,
    "boolean": Usage.BOOLEAN,
    "none": Usage.NULL,
}

_ROLE_USAGE = {
    Role.ITERABLE: Usage.ARRAY,
    Role.CONDITION: Usage.BOOLEAN,
}


def _build_usage_table(*groups: tuple[frozenset[str], Usage]) -> dict[str, Usage]:
    table: dict[str, Usage] = {}
    for names, usage in groups:
        for name in names:
            table.setdefault(name, usage)
    return table


_FILTER_USAGE = _build_usage_table(
    (ARRAY_FILTERS, Usage.ARRAY),
    (OBJECT_FILTERS, Usage.OBJECT),
    (NUMBER_FILTERS, Usage.NUMBER),
    (STRING_FILTERS, Usage.STRING),
)
_METHOD_USAGE = _build_usage_table(
    (OBJECT_METHODS, Usage.OBJECT),
    (ARRAY_METHODS, Usage.ARRAY),
    (STRING_METHODS, Usage.STRING),
)
_TEST_USAGE = _build_usage_table(
    (NUMBER_TESTS, Usage.NUMBER),
    (STRING_TESTS, Usage.STRING),
    (OBJECT_TESTS, Usage.OBJECT),
    (ARRAY_TESTS, Usage.ARRAY),
    (BOOLEAN_TESTS, Usage.BOOLEAN),
)


@dataclass(frozen=True, slots=True)
class Token:
    """Expression token: kind is string, number, boolean, none, name or op."""

    kind: str
    value: str
    offset: int

    def is_op(self, value: str) -> bool:
        return self.kind == "op" and self.value == value

    def is_word(self, value: str) -> bool:
        return self.kind == "name" and self.value == value


@dataclass(frozen=True, slots=True)
class ParsedExpression:
    """Result of analyzing one expression.

    Attributes:
        references: Free-variable accesses ordered by position
        source: Path the expression iterates over unchanged, when it is a
            single access path optionally followed by element-preserving
            filters (used to alias loop and ``set``/``with`` variables)
        entry: Path standing for each value when the whole expression is
            ``mapping.items()`` or ``mapping.values()``
        pairs: True when iteration yields ``(key, value)`` pairs
        truncated: Nesting exceeded MAX_EXPRESSION_DEPTH; the innermost
            parts were skipped
    """

    references: tuple[Reference, ...] = ()
    source: AccessPath | None = None
    entry: AccessPath | None = None
    pairs: bool = False
    truncated: bool = False


@dataclass(slots=True)
class _Operand:
    """Working state for one operand of an operator chain."""

    offset: int
    path: AccessPath | None = None
    literal: Usage | None = None
    group: list[Token] | None = None
    negated: bool = False
    minus: bool = False
    # False once the path can no longer be extended (method, slice, filter...)
    open: bool = True
    # True when the value seen by neighbours is no longer the path's own value
    transformed: bool = False
    sliced: bool = False
    # "items" or "values" when the operand ends in that mapping method
    entries: str | None = None
    own: Usage | None = None
    filters: list[str] = field(default_factory=list)
    test: str | None = None


def lex(text: str) -> list[Token]:
    """Lex expression text. Unrecognized characters are skipped."""
    tokens: list[Token] = []
    pos = 0
    length = len(text)
    while pos < length:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            pos += 1
            continue
        pos = match.end()
        kind = match.lastgroup
        if kind in ("ws", "badstring"):
            continue
        value = match.group()
        if kind == "name":
            if value in BOOLEAN_LITERALS:
                kind = "boolean"
            elif value in NONE_LITERALS:
                kind = "none"
        tokens.append(Token(kind, value, match.start()))
    return tokens


def _closing(tokens: list[Token], index: int) -> int:
    """Index of the token closing the bracket at ``index`` (len when unbalanced)."""
    depth = 0
    for i in range(index, len(tokens)):
        token = tokens[i]
        if token.kind != "op":
            continue
        if token.value in _OPENERS:
            depth += 1
        elif token.value in ")]}":
            depth -= 1
            if depth == 0:
                return i
    return len(tokens)


def _split(tokens: list[Token], separator: str) -> list[list[Token]]:
    """Split tokens on a top-level operator; empty parts are dropped."""
    parts: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    for token in tokens:
        if token.kind == "op":
            if token.value in _OPENERS:
                depth += 1
            elif token.value in ")]}" and depth > 0:
                depth -= 1
            elif depth == 0 and token.value == separator:
                if current:
                    parts.append(current)
                current = []
                continue
        current.append(token)
    if current:
        parts.append(current)
    return parts


def _find_word(tokens: list[Token], word: str, start: int = 0) -> int:
    """Index of a top-level keyword token at or after ``start``, or -1."""
    depth = 0
    for i, token in enumerate(tokens):
        if token.kind == "op":
            if token.value in _OPENERS:
                depth += 1
            elif token.value in ")]}" and depth > 0:
                depth -= 1
        elif depth == 0 and i >= start and token.is_word(word):
            return i
    return -1


def _literal_key(tokens: list[Token]) -> int | str | None:
    """Key of a literal subscript (``[0]``, ``[-1]``, ``["key"]``), else None."""
    if len(tokens) == 1:
        token = tokens[0]
        if token.kind == "string":
            return token.value[1:-1]
        if token.kind == "number" and token.value.replace("_", "").isdigit():
            return int(token.value.replace("_", ""))
    if len(tokens) == 2 and tokens[0].is_op("-") and tokens[1].kind == "number":
        digits = tokens[1].value.replace("_", "")
        if digits.isdigit():
            return -int(digits)
    return None


class ExpressionParser:
    """Extracts usage-tagged references from expression text.

    Stateless between calls; ``excluded`` names (globals the rendering
    environment provides) never become references.
    """

    def __init__(self, excluded: frozenset[str] = GLOBAL_NAMES) -> None:
        self._excluded = excluded
        self._references: list[Reference] = []
        self._entry: _Operand | None = None
        self._depth = 0
        self._truncated = False

    def parse(self, text: str, role: Role | None = None) -> ParsedExpression:
        self._references = []
        self._entry = None
        self._depth = 0
        self._truncated = False
        source = self._expression(lex(text), _ROLE_USAGE.get(role) if role else None)
        references = tuple(sorted(self._references, key=lambda ref: ref.offset))
        if source is not None and source.root in self._excluded:
            source = None

        entry = None
        pairs = False
        if self._entry is not None and self._entry.path is not None:
            if self._entry.path.root not in self._excluded:
                entry = self._entry.path.child(Attr(SAMPLE_MAPPING_KEY))
                pairs = self._entry.entries == "items"

        self._references = []
        self._entry = None
        return ParsedExpression(references, source, entry, pairs, self._truncated)

    # =========================================================================
    # Structure
    # =========================================================================

    def _expression(self, tokens: list[Token], context: Usage | None) -> AccessPath | None:
        """Analyze a token run; returns its iteration source, if any."""
        if not tokens:
            return None
        if self._depth >= MAX_EXPRESSION_DEPTH:
            self._truncated = True
            return None

        self._depth += 1
        try:
            return self._nested(tokens, context)
        finally:
            self._depth -= 1

    def _nested(self, tokens: list[Token], context: Usage | None) -> AccessPath | None:
        parts = _split(tokens, ",")
        if len(parts) > 1:
            for part in parts:
                self._expression(part, None)
            return None

        # X if C else Y
        if_at = _find_word(tokens, "if", start=1)
        if if_at != -1:
            else_at = _find_word(tokens, "else", start=if_at + 1)
            self._expression(tokens[:if_at], context)
            cond_end = else_at if else_at != -1 else len(tokens)
            self._expression(tokens[if_at + 1 : cond_end], Usage.BOOLEAN)
            if else_at != -1:
                self._expression(tokens[else_at + 1 :], context)
            return None

        return self._chain(tokens, context)

    def _chain(self, tokens: list[Token], context: Usage | None) -> AccessPath | None:
        operands: list[_Operand] = []
        ops: list[str | None] = []
        pending: str | None = None
        i = 0
        while i < len(tokens):
            operand, i = self._operand(tokens, i)
            if operand is None:
                continue
            if operands:
                ops.append(pending)
            operands.append(operand)
            pending, i = self._binary_operator(tokens, i)

        sole = len(operands) == 1
        source: AccessPath | None = None
        for index, operand in enumerate(operands):
            usage = self._usage(operand, index, operands, ops, context if sole else None)
            if operand.path is not None:
                self._emit(operand.path, usage, operand.offset)
            if operand.group is not None:
                group_source = self._expression(operand.group, usage)
                if sole and self._preserves_elements(operand):
                    source = group_source
            elif sole and operand.path is not None and self._preserves_elements(operand):
                source = operand.path
        if sole and self._depth == 1 and self._iterates_entries(operands[0]):
            self._entry = operands[0]
        return source

    def _operand(self, tokens: list[Token], i: int) -> tuple[_Operand | None, int]:
        """Read one operand starting at ``i``; (None, next) when none starts there."""
        negated = minus = False
        while i < len(tokens):
            token = tokens[i]
            if token.is_word("not"):
                negated = True
            elif token.kind == "op" and token.value in ("-", "+"):
                minus = minus or token.value == "-"
            else:
                break
            i += 1
        if i >= len(tokens):
            return None, i

        token = tokens[i]
        operand = _Operand(offset=token.offset, negated=negated, minus=minus)
        if token.kind == "name":
            if token.value in KEYWORDS:
                return None, i + 1
            operand.path = AccessPath(token.value)
            i += 1
        elif token.kind in _LITERAL_USAGE:
            operand.literal = _LITERAL_USAGE[token.kind]
            i += 1
        elif token.is_op("("):
            close = _closing(tokens, i)
            operand.group = tokens[i + 1 : close]
            i = close + 1
        elif token.is_op("["):
            close = _closing(tokens, i)
            for item in _split(tokens[i + 1 : close], ","):
                self._expression(item, None)
            operand.literal = Usage.ARRAY
            i = close + 1
        elif token.is_op("{"):
            close = _closing(tokens, i)
            for item in _split(tokens[i + 1 : close], ","):
                for side in _split(item, ":"):
                    self._expression(side, None)
            operand.literal = Usage.OBJECT
            i = close + 1
        else:
            return None, i + 1

        return operand, self._postfix(tokens, i, operand)

    def _binary_operator(self, tokens: list[Token], i: int) -> tuple[str | None, int]:
        if i >= len(tokens):
            return None, i
        token = tokens[i]
        if token.kind == "op" and token.value in BINARY_OPERATORS:
            return token.value, i + 1
        if token.kind == "name":
            if token.value in ("and", "or", "in"):
                return token.value, i + 1
            if token.value == "not" and i + 1 < len(tokens) and tokens[i + 1].is_word("in"):
                return "not in", i + 2
        return None, i

    # =========================================================================
    # Postfix
    # =========================================================================

    def _postfix(self, tokens: list[Token], i: int, operand: _Operand) -> int:
        while i < len(tokens):
            token = tokens[i]
            if token.is_op("."):
                i = self._attribute(tokens, i + 1, operand)
            elif token.is_op("["):
                close = _closing(tokens, i)
                self._subscript(operand, tokens[i + 1 : close])
                i = close + 1
            elif token.is_op("("):
                close = _closing(tokens, i)
                self._call(operand, tokens[i + 1 : close])
                i = close + 1
            elif token.is_op("|"):
                i = self._filter(tokens, i + 1, operand)
            elif token.is_word("is"):
                i = self._test(tokens, i + 1, operand)
            else:
                break
        return i

    def _attribute(self, tokens: list[Token], i: int, operand: _Operand) -> int:
        if i >= len(tokens):
            return i
        token = tokens[i]
        if token.kind == "number" and token.value.isdigit():
            # items.0 is Jinja shorthand for items[0]
            if operand.path is not None and operand.open:
                operand.path = operand.path.child(Index(int(token.value)))
            return i + 1
        if token.kind not in ("name", "boolean", "none"):
            return i

        name = token.value
        i += 1
        if i < len(tokens) and tokens[i].is_op("("):
            close = _closing(tokens, i)
            self._method(operand, name)
            self._arguments(tokens[i + 1 : close], None)
            return close + 1

        if operand.path is not None and operand.open:
            operand.path = operand.path.child(Attr(name))
        return i

    def _method(self, operand: _Operand, name: str) -> None:
        """Record a ``.name(...)`` call on the operand."""
        if operand.path is None or not operand.open:
            operand.transformed = True
            return
        if name in BUILTIN_METHODS:
            # The method is never part of the path
            operand.own = _METHOD_USAGE.get(name)
            if name in ("items", "values"):
                operand.entries = name
        else:
            operand.path = operand.path.child(Attr(name))
        operand.open = False
        operand.transformed = True

    def _subscript(self, operand: _Operand, inner: list[Token]) -> None:
        if self._has_colon(inner):
            for bound in _split(inner, ":"):
                self._expression(bound, Usage.NUMBER)
            if operand.path is not None and operand.open:
                operand.own = Usage.ARRAY
                operand.sliced = True
                operand.open = False
            return

        key = _literal_key(inner)
        if key is None:
            self._expression(inner, Usage.NUMBER)
            step = ELEMENT
        else:
            step = Index(key)
        if operand.path is not None and operand.open:
            operand.path = operand.path.child(step)

    def _has_colon(self, tokens: list[Token]) -> bool:
        depth = 0
        for token in tokens:
            if token.kind != "op":
                continue
            if token.value in _OPENERS:
                depth += 1
            elif token.value in ")]}":
                depth -= 1
            elif depth == 0 and token.value == ":":
                return True
        return False

    def _call(self, operand: _Operand, inner: list[Token]) -> None:
        context = None
        if operand.path is not None and operand.open and not operand.path.segments:
            # A directly called bare name is a callable, not data
            if operand.path.root == "range":
                context = Usage.NUMBER
            operand.path = None
        operand.open = False
        operand.transformed = True
        self._arguments(inner, context)

    def _arguments(self, tokens: list[Token], context: Usage | None) -> None:
        """Analyze call arguments; keyword names and splat markers are skipped."""
        for part in _split(tokens, ","):
            if len(part) >= 2 and part[0].kind == "name" and part[1].is_op("="):
                part = part[2:]
            while part and part[0].kind == "op" and part[0].value in ("*", "**"):
                part = part[1:]
            self._expression(part, context)

    def _filter(self, tokens: list[Token], i: int, operand: _Operand) -> int:
        if i >= len(tokens) or tokens[i].kind != "name":
            return i
        name = tokens[i].value
        i += 1
        while i + 1 < len(tokens) and tokens[i].is_op(".") and tokens[i + 1].kind == "name":
            name = f"{name}.{tokens[i + 1].value}"
            i += 2
        operand.filters.append(name)
        if name not in ELEMENT_PRESERVING_FILTERS and name not in NEUTRAL_FILTERS:
            operand.transformed = True
        operand.open = False
        if i < len(tokens) and tokens[i].is_op("("):
            close = _closing(tokens, i)
            self._arguments(tokens[i + 1 : close], None)
            i = close + 1
        return i

    def _test(self, tokens: list[Token], i: int, operand: _Operand) -> int:
        if i < len(tokens) and tokens[i].is_word("not"):
            i += 1
        if i >= len(tokens) or tokens[i].kind not in ("name", "boolean", "none"):
            return i
        if operand.test is None:
            operand.test = tokens[i].value.lower()
        operand.open = False
        operand.transformed = True
        i += 1

        if i >= len(tokens):
            return i
        token = tokens[i]
        if token.is_op("("):
            close = _closing(tokens, i)
            self._arguments(tokens[i + 1 : close], None)
            return close + 1
        if token.kind in _LITERAL_USAGE:
            return i + 1
        if token.kind == "name" and token.value not in KEYWORDS:
            # Single bare argument: ``is divisibleby step`` or ``is sameas other.x``
            end = i + 1
            while (
                end + 1 < len(tokens)
                and tokens[end].is_op(".")
                and tokens[end + 1].kind == "name"
            ):
                end += 2
            self._expression(tokens[i:end], None)
            return end
        return i

    # =========================================================================
    # Usage
    # =========================================================================

    def _usage(
        self,
        operand: _Operand,
        index: int,
        operands: list[_Operand],
        ops: list[str | None],
        context: Usage | None,
    ) -> Usage | None:
        if operand.own is not None:
            return operand.own
        for name in operand.filters:
            if name in NEUTRAL_FILTERS:
                continue
            usage = _FILTER_USAGE.get(name)
            if usage is not None:
                return usage
            break
        if operand.test is not None and operand.test in _TEST_USAGE:
            return _TEST_USAGE[operand.test]
        if operand.transformed:
            return None

        neighbours: list[tuple[str | None, _Operand]] = []
        if index > 0:
            neighbours.append((ops[index - 1], operands[index - 1]))
        if index < len(ops):
            neighbours.append((ops[index], operands[index + 1]))

        for op, other in neighbours:
            if op is None or op in BOOLEAN_OPERATORS:
                continue
            usage = self._operator_usage(op, other)
            if usage is not None:
                return usage

        if operand.negated:
            return Usage.BOOLEAN
        if operand.minus:
            return Usage.NUMBER
        if any(op in BOOLEAN_OPERATORS for op, _ in neighbours):
            return Usage.BOOLEAN
        return context

    def _operator_usage(self, op: str, other: _Operand) -> Usage | None:
        """Usage implied by a binary operator, given the operand on its other side."""
        if op in COMPARISON_OPERATORS:
            return Usage.NUMBER
        if op == "%" and other.literal is Usage.STRING:
            # String formatting: the argument's type is unknown
            return None
        if op in ARITHMETIC_OPERATORS:
            return Usage.NUMBER
        if op == "~":
            return Usage.STRING
        if op == "+":
            if other.literal in (Usage.STRING, Usage.NUMBER):
                return other.literal
            return None
        if op in EQUALITY_OPERATORS:
            return other.literal
        return None

    def _preserves_elements(self, operand: _Operand) -> bool:
        """True when iterating the operand yields the elements of its path."""
        return (
            not operand.negated
            and not operand.minus
            and not operand.transformed
            and operand.test is None
            and (operand.own is None or operand.sliced)
        )

    def _iterates_entries(self, operand: _Operand) -> bool:
        """True for ``mapping.items()``/``mapping.values()``, optionally sorted or listed."""
        return (
            operand.entries is not None
            and operand.path is not None
            and not operand.negated
            and not operand.minus
            and operand.test is None
            and all(name in ELEMENT_PRESERVING_FILTERS for name in operand.filters)
        )

    def _emit(self, path: AccessPath, usage: Usage | None, offset: int) -> None:
        if path.root in self._excluded:
            return
        self._references.append(Reference(path, usage or Usage.UNKNOWN, offset))


def parse_expression(
    text: str,
    role: Role | None = None,
    *,
    excluded: frozenset[str] = GLOBAL_NAMES,
) -> ParsedExpression:
    """Extract usage-tagged free-variable references from expression text.

    Args:
        text: Expression source, without delimiters
        role: Role of the expression in its statement, if any
        excluded: Names provided by the rendering environment

    Returns:
        ParsedExpression with references in source order
    """
    return ExpressionParser(excluded).parse(text, role)
