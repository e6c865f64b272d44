"""Statement classification for jinja_schema.

Turns the inner text of a ``{% ... %}`` segment into a ``Statement``:
its tag, the names it binds, and its role-tagged sub-expressions. The
expressions themselves are not parsed here.

Dispatch is a table from leading keyword to ``_parse_<keyword>`` method.
Any ``endX`` keyword becomes ``Tag.END`` with ``name="X"``; keywords not
in the table become ``Tag.UNKNOWN``. Nothing in this module raises on
malformed input: partial results are returned with ``malformed=True``.
"""

from __future__ import annotations

import re
from dataclasses import replace

from jinja_schema.nodes import Role, Statement, Tag
from jinja_schema.parser.scanning import (
    find_assignment,
    find_keyword,
    match_bracket,
    split_top_level,
    strip_parens,
)

_KEYWORD_RE = re.compile(r"([A-Za-z_]\w*)(.*)", re.DOTALL)
_NAME_RE = re.compile(r"[A-Za-z_]\w*")
_STRING_RE = re.compile(r"""(?:'[^'\\]*(?:\\.[^'\\]*)*'|"[^"\\]*(?:\\.[^"\\]*)*")""")
_CONTEXT_SUFFIX_RE = re.compile(r"\s+(?:with|without)\s+context\s*$")
_IGNORE_MISSING_RE = re.compile(r"\s+ignore\s+missing\s*$")
_RECURSIVE_SUFFIX_RE = re.compile(r"\s+recursive\s*$")
_BLOCK_MODIFIERS = frozenset({"scoped", "required"})

# Leading keyword -> parser method name
_STATEMENT_PARSERS: dict[str, str] = {
    "for": "_parse_for",
    "if": "_parse_if",
    "elif": "_parse_elif",
    "else": "_parse_else",
    "pluralize": "_parse_else",
    "set": "_parse_set",
    "with": "_parse_with",
    "macro": "_parse_macro",
    "call": "_parse_call",
    "import": "_parse_import",
    "from": "_parse_from",
    "block": "_parse_block",
    "extends": "_parse_extends",
    "include": "_parse_include",
    "raw": "_parse_raw",
    "autoescape": "_parse_autoescape",
    "filter": "_parse_filter",
    "trans": "_parse_trans",
    "do": "_parse_do",
    "break": "_parse_break",
    "continue": "_parse_continue",
}


def _is_name(text: str) -> bool:
    return _NAME_RE.fullmatch(text) is not None


def _literal_string(text: str) -> str | None:
    """Contents of a single quoted string literal, or None."""
    text = text.strip()
    if _STRING_RE.fullmatch(text):
        return text[1:-1]
    return None


class StatementParser:
    """Classifies statement text into ``Statement`` nodes.

    Stateless; one instance can parse any number of statements.

    Example:
        >>> stmt = StatementParser().parse("for user in users if user.active")
        >>> stmt.tag, stmt.targets
        (<Tag.FOR: 'for'>, ('user',))
        >>> stmt.subexpressions
        ((<Role.ITERABLE: 'iterable'>, 'users'), (<Role.CONDITION: 'condition'>, 'user.active'))
    """

    def parse(self, text: str) -> Statement:
        raw = text.strip()
        match = _KEYWORD_RE.match(raw)
        if match is None:
            return Statement(Tag.UNKNOWN, raw)

        keyword, rest = match.group(1), match.group(2).strip()
        method_name = _STATEMENT_PARSERS.get(keyword)
        if method_name is not None:
            return getattr(self, method_name)(raw, rest)
        if keyword.startswith("end") and len(keyword) > 3:
            return Statement(Tag.END, raw, name=keyword[3:])
        return Statement(Tag.UNKNOWN, raw, name=keyword)

    # =========================================================================
    # Scoping statements
    # =========================================================================

    def _parse_for(self, raw: str, rest: str) -> Statement:
        """Parse ``for a, b in iterable [if cond] [recursive]``."""
        split = find_keyword(rest, "in")
        if split == -1:
            return Statement(Tag.FOR, raw, targets=self._names(rest), malformed=True)

        targets = self._names(rest[:split])
        tail = _RECURSIVE_SUFFIX_RE.sub("", rest[split + 2 :]).strip()

        subexpressions: list[tuple[Role, str]] = []
        cond_at = find_keyword(tail, "if")
        if cond_at == -1:
            iterable, condition = tail, ""
        else:
            iterable, condition = tail[:cond_at].strip(), tail[cond_at + 2 :].strip()
        if iterable:
            subexpressions.append((Role.ITERABLE, iterable))
        if condition:
            subexpressions.append((Role.CONDITION, condition))

        return Statement(
            Tag.FOR,
            raw,
            subexpressions=tuple(subexpressions),
            targets=targets,
            malformed=not targets or not iterable,
        )

    def _parse_set(self, raw: str, rest: str) -> Statement:
        """Parse inline ``set a = expr`` / ``set a, b = expr`` or block ``set a``."""
        eq = find_assignment(rest)
        if eq == -1:
            # Block form, optionally filtered: {% set body | upper %}
            target = split_top_level(rest, "|")
            targets = self._names(target[0]) if target else ()
            return Statement(
                Tag.SET,
                raw,
                targets=targets,
                block_form=True,
                malformed=not targets,
            )

        lhs, rhs = rest[:eq].strip(), rest[eq + 1 :].strip()
        subexpressions: list[tuple[Role, str]] = []
        targets: tuple[str, ...] = ()
        if "." in lhs or "[" in lhs:
            # Attribute assignment on a namespace object binds nothing
            subexpressions.append((Role.TARGET, lhs))
        else:
            targets = self._names(lhs)
        if rhs:
            subexpressions.append((Role.VALUE, rhs))

        return Statement(
            Tag.SET,
            raw,
            subexpressions=tuple(subexpressions),
            targets=targets,
            malformed=not rhs or not (targets or subexpressions),
        )

    def _parse_with(self, raw: str, rest: str) -> Statement:
        """Parse ``with a = x, b = y`` (bare ``with`` is valid)."""
        targets, subexpressions, malformed = self._assignments(rest)
        return Statement(
            Tag.WITH,
            raw,
            subexpressions=subexpressions,
            targets=targets,
            malformed=malformed,
        )

    def _parse_macro(self, raw: str, rest: str) -> Statement:
        """Parse ``macro name(param, other=default)``."""
        match = _NAME_RE.match(rest)
        if match is None:
            return Statement(Tag.MACRO, raw, malformed=True)

        name = match.group()
        signature = rest[match.end() :].strip()
        if not signature.startswith("("):
            return Statement(Tag.MACRO, raw, name=name, malformed=bool(signature))

        params, defaults, malformed = self._signature(signature)
        return Statement(
            Tag.MACRO,
            raw,
            subexpressions=defaults,
            name=name,
            params=params,
            malformed=malformed,
        )

    def _parse_call(self, raw: str, rest: str) -> Statement:
        """Parse ``call(params) callee(args)`` or ``call callee(args)``."""
        params: tuple[str, ...] = ()
        defaults: tuple[tuple[Role, str], ...] = ()
        malformed = False
        if rest.startswith("("):
            close = match_bracket(rest, 0)
            if close == -1:
                return Statement(Tag.CALL, raw, malformed=True)
            params, defaults, malformed = self._signature(rest[: close + 1])
            rest = rest[close + 1 :].strip()

        subexpressions = defaults
        if rest:
            subexpressions = (*defaults, (Role.CALL, rest))
        return Statement(
            Tag.CALL,
            raw,
            subexpressions=subexpressions,
            params=params,
            malformed=malformed or not rest,
        )

    def _parse_block(self, raw: str, rest: str) -> Statement:
        """Parse ``block name [scoped] [required]``."""
        words = rest.split()
        name = words[0] if words and _is_name(words[0]) else None
        extra = [w for w in words[1:] if w not in _BLOCK_MODIFIERS]
        return Statement(Tag.BLOCK, raw, name=name, malformed=name is None or bool(extra))

    def _parse_filter(self, raw: str, rest: str) -> Statement:
        """Parse ``filter upper``; the filter section is not analyzed."""
        return Statement(Tag.FILTER, raw, name=rest or None, malformed=not rest)

    def _parse_autoescape(self, raw: str, rest: str) -> Statement:
        return Statement(Tag.AUTOESCAPE, raw)

    def _parse_trans(self, raw: str, rest: str) -> Statement:
        """Parse ``trans [count=expr, name, ...]``.

        Each assigned or listed name is bound for the trans body; listed
        names also reference the context variable of the same name.
        """
        targets: list[str] = []
        subexpressions: list[tuple[Role, str]] = []
        malformed = False
        for part in split_top_level(rest):
            eq = find_assignment(part)
            if eq == -1:
                if part in ("trimmed", "notrimmed"):
                    continue
                if not _is_name(part):
                    malformed = True
                    continue
                targets.append(part)
                subexpressions.append((Role.VALUE, part))
                continue
            name, value = part[:eq].strip(), part[eq + 1 :].strip()
            if _is_name(name) and value:
                targets.append(name)
                subexpressions.append((Role.VALUE, value))
            else:
                malformed = True
        return Statement(
            Tag.TRANS,
            raw,
            subexpressions=tuple(subexpressions),
            targets=tuple(targets),
            malformed=malformed,
        )

    def _parse_raw(self, raw: str, rest: str) -> Statement:
        return Statement(Tag.RAW, raw, malformed=bool(rest))

    # =========================================================================
    # Conditions and expressions
    # =========================================================================

    def _parse_if(self, raw: str, rest: str) -> Statement:
        return self._conditional(Tag.IF, raw, rest)

    def _parse_elif(self, raw: str, rest: str) -> Statement:
        return self._conditional(Tag.ELIF, raw, rest)

    def _parse_else(self, raw: str, rest: str) -> Statement:
        """Parse ``else``, and ``pluralize`` which splits a trans body the same way."""
        keyword = raw.split(None, 1)[0]
        if keyword == "pluralize":
            subexpressions = ((Role.VALUE, rest),) if rest else ()
            return Statement(Tag.ELSE, raw, subexpressions=subexpressions, name=keyword)
        return Statement(Tag.ELSE, raw, malformed=bool(rest))

    def _parse_do(self, raw: str, rest: str) -> Statement:
        if not rest:
            return Statement(Tag.DO, raw, malformed=True)
        return Statement(Tag.DO, raw, subexpressions=((Role.EXPRESSION, rest),))

    def _parse_break(self, raw: str, rest: str) -> Statement:
        return Statement(Tag.BREAK, raw, malformed=bool(rest))

    def _parse_continue(self, raw: str, rest: str) -> Statement:
        return Statement(Tag.CONTINUE, raw, malformed=bool(rest))

    # =========================================================================
    # Cross-file statements
    # =========================================================================

    def _parse_extends(self, raw: str, rest: str) -> Statement:
        """Parse ``extends "base.html"``."""
        return self._template_reference(Tag.EXTENDS, raw, rest)

    def _parse_include(self, raw: str, rest: str) -> Statement:
        """Parse ``include "x.html" [ignore missing] [with|without context]``."""
        rest = _CONTEXT_SUFFIX_RE.sub("", rest)
        rest = _IGNORE_MISSING_RE.sub("", rest)
        return self._template_reference(Tag.INCLUDE, raw, rest)

    def _parse_import(self, raw: str, rest: str) -> Statement:
        """Parse ``import "macros.html" as m [with|without context]``."""
        rest = _CONTEXT_SUFFIX_RE.sub("", rest)
        split = find_keyword(rest, "as")
        if split == -1:
            return self._template_reference(Tag.IMPORT, raw, rest, malformed=True)

        alias = rest[split + 2 :].strip()
        targets = (alias,) if _is_name(alias) else ()
        statement = self._template_reference(
            Tag.IMPORT, raw, rest[:split], malformed=not targets
        )
        return replace(statement, targets=targets)

    def _parse_from(self, raw: str, rest: str) -> Statement:
        """Parse ``from "macros.html" import a, b as c [with|without context]``."""
        rest = _CONTEXT_SUFFIX_RE.sub("", rest)
        split = find_keyword(rest, "import")
        if split == -1:
            return self._template_reference(Tag.FROM, raw, rest, malformed=True)

        targets: list[str] = []
        malformed = False
        for part in split_top_level(rest[split + 6 :]):
            words = part.split()
            if len(words) == 1 and _is_name(words[0]):
                targets.append(words[0])
            elif len(words) == 3 and words[1] == "as" and _is_name(words[2]):
                targets.append(words[2])
            else:
                malformed = True
        statement = self._template_reference(
            Tag.FROM, raw, rest[:split], malformed=malformed or not targets
        )
        return replace(statement, targets=tuple(targets))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _conditional(self, tag: Tag, raw: str, rest: str) -> Statement:
        if not rest:
            return Statement(tag, raw, malformed=True)
        return Statement(tag, raw, subexpressions=((Role.CONDITION, rest),))

    def _template_reference(
        self, tag: Tag, raw: str, expr: str, *, malformed: bool = False
    ) -> Statement:
        """Record a literal template path, or keep a computed one as an expression."""
        expr = expr.strip()
        template = _literal_string(expr)
        if template is not None or not expr:
            return Statement(tag, raw, template=template, malformed=malformed or not expr)
        return Statement(
            tag,
            raw,
            subexpressions=((Role.VALUE, expr),),
            malformed=malformed,
        )

    def _names(self, text: str) -> tuple[str, ...]:
        """Valid target names from ``a``, ``a, b`` or ``(a, b)``."""
        return tuple(
            part for part in split_top_level(strip_parens(text)) if _is_name(part)
        )

    def _assignments(
        self, text: str
    ) -> tuple[tuple[str, ...], tuple[tuple[Role, str], ...], bool]:
        """Parse ``a = x, b = y`` into targets and value expressions."""
        targets: list[str] = []
        values: list[tuple[Role, str]] = []
        malformed = False
        for part in split_top_level(text):
            eq = find_assignment(part)
            if eq == -1:
                malformed = True
                continue
            name, value = part[:eq].strip(), part[eq + 1 :].strip()
            if not _is_name(name) or not value:
                malformed = True
                continue
            targets.append(name)
            values.append((Role.VALUE, value))
        return tuple(targets), tuple(values), malformed

    def _signature(
        self, text: str
    ) -> tuple[tuple[str, ...], tuple[tuple[Role, str], ...], bool]:
        """Parse ``(a, b=default)`` into parameter names and default expressions."""
        close = match_bracket(text, 0)
        malformed = close == -1
        body = text[1:close] if close != -1 else text[1:]
        if close != -1 and text[close + 1 :].strip():
            malformed = True

        params: list[str] = []
        defaults: list[tuple[Role, str]] = []
        for part in split_top_level(body):
            eq = find_assignment(part)
            name = part if eq == -1 else part[:eq].strip()
            if not _is_name(name):
                malformed = True
                continue
            params.append(name)
            if eq != -1:
                default = part[eq + 1 :].strip()
                if default:
                    defaults.append((Role.DEFAULT, default))
        return tuple(params), tuple(defaults), malformed


_PARSER = StatementParser()


def parse_statement(text: str) -> Statement:
    """Classify the inner text of a ``{% ... %}`` segment."""
    return _PARSER.parse(text)
