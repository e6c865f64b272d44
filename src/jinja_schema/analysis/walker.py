"""Single-pass schema extraction over a template's segments.

The walker drives the whole analysis:

1. The lexer splits the source into segments.
2. Each ``{% ... %}`` segment is classified and dispatched to a
   ``_visit_<tag>`` handler, which analyzes its sub-expressions and opens
   or closes scopes.
3. Each ``{{ ... }}`` segment is analyzed as a plain expression.
4. Every reference is resolved against the scope stack; free ones (and
   loop-variable aliases) are folded into the schema.

Expressions are always analyzed before the bindings of their own statement
take effect, so ``{% set count = count + 1 %}`` reports ``count``.

Thread-safe: every ``analyze()`` call uses fresh state.

Example:
    >>> analysis = analyze_template("{% extends 'base.html' %}{{ title }}")
    >>> list(analysis.schema), analysis.templates
    (['title'], ['base.html'])
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from jinja_schema._types import SegmentKind
from jinja_schema.analysis.builder import SchemaBuilder
from jinja_schema.analysis.config import DEFAULT_CONFIG, ExtractionConfig
from jinja_schema.analysis.metadata import TemplateAnalysis, TemplateDependency
from jinja_schema.analysis.scope import ScopeKind, ScopeTracker
from jinja_schema.exceptions import Diagnostic, ErrorCode
from jinja_schema.lexer import Lexer
from jinja_schema.nodes import ELEMENT, AccessPath, Role, Statement, Tag, Usage
from jinja_schema.parser.expressions import (
    MAX_EXPRESSION_DEPTH,
    ExpressionParser,
    ParsedExpression,
)
from jinja_schema.parser.statements import StatementParser
from jinja_schema.schema import VariableSchema
from jinja_schema.utils.constants import GLOBAL_NAMES

logger = logging.getLogger(__name__)

# Longer resolved paths are cut short and reported
MAX_PATH_LENGTH = 256

# End-tag keyword -> frame kind it closes
_END_SCOPES: dict[str, ScopeKind] = {
    "for": ScopeKind.FOR,
    "if": ScopeKind.IF,
    "with": ScopeKind.WITH,
    "macro": ScopeKind.MACRO,
    "call": ScopeKind.CALL,
    "block": ScopeKind.BLOCK,
    "filter": ScopeKind.FILTER,
    "autoescape": ScopeKind.AUTOESCAPE,
    "set": ScopeKind.SET,
    "trans": ScopeKind.TRANS,
}


class SchemaWalker:
    """Extract a variable schema from template source.

    Example:
        >>> walker = SchemaWalker()
        >>> walker.analyze("{% for u in users %}{{ u.email }}{% endfor %}").schema.to_sample()
        {'users': [{'email': ''}]}
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        self._statements = StatementParser()
        self._expressions = ExpressionParser(GLOBAL_NAMES | self._config.extra_globals)
        self._dispatch: dict[Tag, Callable[[Statement, int], None]] = {
            tag: getattr(self, f"_visit_{tag.value}") for tag in Tag
        }
        self._scopes = ScopeTracker()
        self._builder = SchemaBuilder()
        self._diagnostics: list[Diagnostic] = []
        self._dependencies: list[TemplateDependency] = []
        self._offset = 0

    def analyze(self, source: str) -> TemplateAnalysis:
        """Analyze template source in one pass.

        Never raises on malformed template syntax; degradations are
        returned as diagnostics.
        """
        # Reset state for each analysis
        self._scopes = ScopeTracker()
        self._builder = SchemaBuilder()
        self._diagnostics = []
        self._dependencies = []

        lexer = Lexer(source, raw_is_inert=self._config.raw_is_inert)
        segments = lexer.tokenize()
        self._diagnostics.extend(lexer.diagnostics)

        for segment in segments:
            self._offset = segment.start
            if segment.kind is SegmentKind.EXPRESSION:
                self._references(segment.inner)
            elif segment.kind is SegmentKind.STATEMENT:
                statement = self._statements.parse(segment.inner)
                if statement.malformed:
                    self._report(
                        ErrorCode.MALFORMED_STATEMENT,
                        f"Could not fully read {{% {statement.raw} %}}",
                        segment.start,
                    )
                self._dispatch[statement.tag](statement, segment.start)

        for scope in self._scopes.open_scopes():
            self._report(
                ErrorCode.UNCLOSED_BLOCK,
                f"'{scope.kind.value}' block is never closed",
                scope.offset,
            )

        schema = self._builder.build(name_hints=self._config.name_hints)
        diagnostics = tuple(sorted(self._diagnostics, key=lambda d: d.offset))
        return TemplateAnalysis(schema, diagnostics, tuple(self._dependencies))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _references(self, text: str, role: Role | None = None) -> ParsedExpression:
        """Analyze one expression and record its free references."""
        parsed = self._expressions.parse(text, role)
        if parsed.truncated:
            self._report(
                ErrorCode.NESTING_TOO_DEEP,
                f"Expression nested deeper than {MAX_EXPRESSION_DEPTH} levels",
                self._offset,
            )
        for reference in parsed.references:
            path = self._scopes.resolve(reference.path)
            if path is None:
                continue
            usage = reference.usage
            if len(path.segments) > MAX_PATH_LENGTH:
                self._report(
                    ErrorCode.NESTING_TOO_DEEP,
                    f"Path under '{path.root}' longer than {MAX_PATH_LENGTH} steps",
                    self._offset,
                )
                path = AccessPath(path.root, path.segments[:MAX_PATH_LENGTH])
                usage = Usage.UNKNOWN
            self._builder.add(path, usage)
        return parsed

    def _source_of(self, parsed: ParsedExpression | None) -> AccessPath | None:
        """Resolved path a single-target binding should alias, if any."""
        if parsed is None or parsed.source is None:
            return None
        return self._scopes.resolve(parsed.source)

    def _depends_on(self, statement: Statement, offset: int) -> None:
        for text in statement.expressions(Role.VALUE):
            self._references(text)
        if statement.template is not None:
            self._dependencies.append(
                TemplateDependency(statement.tag.value, statement.template, offset)
            )

    def _report(self, code: ErrorCode, message: str, offset: int) -> None:
        logger.debug("%s: %s at offset %d", code.value, message, offset)
        self._diagnostics.append(Diagnostic(code, message, offset))

    # =========================================================================
    # Scoping statements
    # =========================================================================

    def _visit_for(self, statement: Statement, offset: int) -> None:
        """Handle for loop: the iterable is evaluated outside the loop scope."""
        parsed = None
        for text in statement.expressions(Role.ITERABLE):
            parsed = self._references(text, Role.ITERABLE)
        source = self._source_of(parsed)

        targets = statement.targets
        bindings: dict[str, AccessPath | None] = dict.fromkeys(targets)
        if source is not None and len(targets) == 1:
            bindings[targets[0]] = source.child(ELEMENT)
        elif parsed is not None and parsed.entry is not None:
            # mapping.items() binds the value to one sample entry of the mapping
            entry = self._scopes.resolve(parsed.entry)
            if parsed.pairs and len(targets) == 2:
                bindings[targets[1]] = entry
            elif not parsed.pairs and len(targets) == 1:
                bindings[targets[0]] = entry
        self._scopes.push(ScopeKind.FOR, bindings, offset=offset)

        # The loop filter sees the loop variables
        for text in statement.expressions(Role.CONDITION):
            self._references(text, Role.CONDITION)

    def _visit_with(self, statement: Statement, offset: int) -> None:
        """Handle with block: values are evaluated before any name binds."""
        bindings: dict[str, AccessPath | None] = {}
        values = statement.expressions(Role.VALUE)
        for name, text in zip(statement.targets, values, strict=False):
            bindings[name] = self._source_of(self._references(text))
        self._scopes.push(ScopeKind.WITH, bindings, offset=offset)

    def _visit_set(self, statement: Statement, offset: int) -> None:
        """Handle inline and block set."""
        if statement.block_form:
            self._scopes.push(ScopeKind.SET, deferred=statement.targets, offset=offset)
            return

        parsed = None
        for text in statement.expressions(Role.VALUE):
            parsed = self._references(text)
        for text in statement.expressions(Role.TARGET):
            self._references(text)

        alias = self._source_of(parsed) if len(statement.targets) == 1 else None
        for name in statement.targets:
            self._scopes.bind(name, alias)

    def _visit_macro(self, statement: Statement, offset: int) -> None:
        """Handle macro definition: defaults are evaluated in the defining scope."""
        for text in statement.expressions(Role.DEFAULT):
            self._references(text)
        if statement.name:
            self._scopes.bind(statement.name)
        self._scopes.push(
            ScopeKind.MACRO, dict.fromkeys(statement.params), offset=offset
        )

    def _visit_call(self, statement: Statement, offset: int) -> None:
        """Handle call block: the callee is evaluated outside the caller body."""
        for text in statement.expressions(Role.DEFAULT):
            self._references(text)
        for text in statement.expressions(Role.CALL):
            self._references(text, Role.CALL)
        self._scopes.push(ScopeKind.CALL, dict.fromkeys(statement.params), offset=offset)

    def _visit_block(self, statement: Statement, offset: int) -> None:
        self._scopes.push(ScopeKind.BLOCK, offset=offset)

    def _visit_filter(self, statement: Statement, offset: int) -> None:
        self._scopes.push(ScopeKind.FILTER, offset=offset)

    def _visit_autoescape(self, statement: Statement, offset: int) -> None:
        self._scopes.push(ScopeKind.AUTOESCAPE, offset=offset)

    def _visit_trans(self, statement: Statement, offset: int) -> None:
        """Handle trans block: its assignments are visible in the body only."""
        for text in statement.expressions(Role.VALUE):
            self._references(text)
        self._scopes.push(ScopeKind.TRANS, dict.fromkeys(statement.targets), offset=offset)

    def _visit_end(self, statement: Statement, offset: int) -> None:
        """Handle any end tag: close the nearest frame of its kind."""
        if statement.name == "raw":
            return
        kind = _END_SCOPES.get(statement.name or "")
        closed = self._scopes.pop(kind) if kind is not None else None
        if closed is None:
            self._report(
                ErrorCode.UNMATCHED_END_TAG,
                f"'{statement.raw}' has no open block to close",
                offset,
            )
            return
        for scope in closed[1:]:
            self._report(
                ErrorCode.UNCLOSED_BLOCK,
                f"'{scope.kind.value}' block closed implicitly by '{statement.raw}'",
                scope.offset,
            )

    # =========================================================================
    # Conditions and expressions
    # =========================================================================

    def _visit_if(self, statement: Statement, offset: int) -> None:
        for text in statement.expressions(Role.CONDITION):
            self._references(text, Role.CONDITION)
        self._scopes.push(ScopeKind.IF, offset=offset)

    def _visit_elif(self, statement: Statement, offset: int) -> None:
        for text in statement.expressions(Role.CONDITION):
            self._references(text, Role.CONDITION)

    def _visit_else(self, statement: Statement, offset: int) -> None:
        if statement.name == "pluralize":
            for text in statement.expressions(Role.VALUE):
                self._references(text)
            return
        # for ... else: the else body cannot see the loop variables
        self._scopes.unbind_loop()

    def _visit_do(self, statement: Statement, offset: int) -> None:
        for text in statement.expressions(Role.EXPRESSION):
            self._references(text)

    def _visit_break(self, statement: Statement, offset: int) -> None:
        pass

    def _visit_continue(self, statement: Statement, offset: int) -> None:
        pass

    def _visit_raw(self, statement: Statement, offset: int) -> None:
        pass

    def _visit_unknown(self, statement: Statement, offset: int) -> None:
        self._report(
            ErrorCode.UNKNOWN_TAG,
            f"Unknown tag '{statement.name or statement.raw}'",
            offset,
        )

    # =========================================================================
    # Cross-file statements
    # =========================================================================

    def _visit_extends(self, statement: Statement, offset: int) -> None:
        self._depends_on(statement, offset)

    def _visit_include(self, statement: Statement, offset: int) -> None:
        self._depends_on(statement, offset)

    def _visit_import(self, statement: Statement, offset: int) -> None:
        """Handle import: the alias binds in the current scope."""
        self._depends_on(statement, offset)
        for name in statement.targets:
            self._scopes.bind(name)

    def _visit_from(self, statement: Statement, offset: int) -> None:
        """Handle from-import: every imported name binds in the current scope."""
        self._depends_on(statement, offset)
        for name in statement.targets:
            self._scopes.bind(name)


def analyze_template(source: str, config: ExtractionConfig | None = None) -> TemplateAnalysis:
    """Analyze template source: schema, diagnostics and template dependencies.

    Args:
        source: Template text
        config: Extraction options (DEFAULT_CONFIG when omitted)

    Returns:
        TemplateAnalysis for this source
    """
    return SchemaWalker(config).analyze(source)


def extract_schema(source: str, config: ExtractionConfig | None = None) -> VariableSchema:
    """Infer the free variables of a template and their shapes.

    Example:
        >>> extract_schema("Hello {{ name }}! You are {{ age }}.").to_sample()
        {'name': '', 'age': 0}
    """
    return analyze_template(source, config).schema
