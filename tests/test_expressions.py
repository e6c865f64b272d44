"""Tests for expression analysis: access paths and usage inference."""

from __future__ import annotations

import pytest

from jinja_schema import Role, parse_expression
from jinja_schema.parser import lex
from jinja_schema.utils.constants import GLOBAL_NAMES


def refs(text: str, role: Role | None = None) -> list[tuple[str, str]]:
    parsed = parse_expression(text, role)
    return [(str(r.path), r.usage.value) for r in parsed.references]


class TestTokens:
    def test_literal_words(self):
        """true/false and none/null lex as literals, not names."""
        assert [t.kind for t in lex("true None null x")] == ["boolean", "none", "none", "name"]

    def test_strings_and_numbers(self):
        tokens = lex("'a b' 3.5 1_000")
        assert [t.kind for t in tokens] == ["string", "number", "number"]
        assert tokens[0].value == "'a b'"

    def test_unterminated_string_is_dropped(self):
        assert [t.value for t in lex("name ~ 'oops")] == ["name", "~"]


class TestAccessPaths:
    def test_simple_name(self):
        assert refs("name") == [("name", "unknown")]

    def test_attribute_chain(self):
        assert refs("user.address.city") == [("user.address.city", "unknown")]

    def test_literal_indexes(self):
        assert refs("items[0]") == [("items[0]", "unknown")]
        assert refs("data['key']") == [("data['key']", "unknown")]
        assert refs("items[-1]") == [("items[-1]", "unknown")]

    def test_numeric_attribute_is_index(self):
        """items.0 is shorthand for items[0]."""
        assert refs("items.0.name") == [("items[0].name", "unknown")]

    def test_dynamic_index(self):
        """A computed subscript is an element access; its key is a number."""
        assert refs("items[i]") == [("items[*]", "unknown"), ("i", "number")]

    def test_slice(self):
        assert refs("items[1:n]") == [("items", "array"), ("n", "number")]
        assert refs("items[:]") == [("items", "array")]

    def test_globals_excluded(self):
        assert refs("loop.index") == []
        assert refs("range(n)") == [("n", "number")]
        assert refs("super()") == []

    def test_called_name_excluded(self):
        """A directly called bare name is a callable, not data."""
        assert refs("greet(name)") == [("name", "unknown")]

    def test_custom_method_stays_in_path(self):
        assert refs("user.get_full_name()") == [("user.get_full_name", "unknown")]

    def test_keyword_arguments(self):
        """Keyword argument names are not references."""
        assert refs("format_date(value, fmt=style)") == [
            ("value", "unknown"),
            ("style", "unknown"),
        ]

    def test_literals_have_no_references(self):
        assert refs("'abc'") == []
        assert refs("42") == []
        assert refs("") == []

    def test_list_and_dict_literals(self):
        assert refs("[a, b]") == [("a", "unknown"), ("b", "unknown")]
        assert refs("{'k': v}") == [("v", "unknown")]

    @pytest.mark.parametrize(
        "word",
        [
            "as",
            "without",
            "context",
            "ignore",
            "missing",
            "scoped",
            "required",
            "recursive",
            "do",
            "break",
            "continue",
        ],
    )
    def test_statement_modifier_words_are_names(self, word):
        """Words reserved only inside certain statements are ordinary names here."""
        assert refs(word) == [(word, "unknown")]
        assert refs(f"{word}.field") == [(f"{word}.field", "unknown")]

    def test_nesting_limit(self):
        deep = parse_expression("f(" * 100 + "a" + ")" * 100)
        assert deep.truncated
        assert deep.references == ()
        shallow = parse_expression("f(g(h(a)))")
        assert not shallow.truncated
        assert [str(r.path) for r in shallow.references] == ["a"]

    def test_extra_excluded_names(self):
        parsed = parse_expression(
            "request.path ~ title", excluded=GLOBAL_NAMES | {"request"}
        )
        assert [str(r.path) for r in parsed.references] == ["title"]


class TestUsage:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("items | length", "array"),
            ("items | join(', ')", "array"),
            ("name | upper", "string"),
            ("name | title | trim", "string"),
            ("value | default('x') | upper", "string"),
            ("amount | round(2)", "number"),
            ("data | dictsort", "object"),
            ("value | safe", "unknown"),
            ("value | custom_filter", "unknown"),
        ],
    )
    def test_filters(self, text, expected):
        """The first non-neutral filter decides the input usage."""
        assert refs(text)[0][1] == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("data.items()", "object"),
            ("data.keys()", "object"),
            ("items.append(x)", "array"),
            ("name.split(',')", "string"),
            ("items.pop()", "unknown"),
        ],
    )
    def test_builtin_methods(self, text, expected):
        """A built-in method decides its receiver's usage and leaves the path."""
        path, usage = refs(text)[0]
        assert "." not in path
        assert usage == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("x is divisibleby 3", "number"),
            ("x is odd", "number"),
            ("x is string", "string"),
            ("x is mapping", "object"),
            ("x is iterable", "array"),
            ("x is not boolean", "boolean"),
            ("x is defined", "unknown"),
        ],
    )
    def test_tests(self, text, expected):
        assert refs(text)[0] == ("x", expected)

    def test_test_argument(self):
        assert refs("x is divisibleby step") == [("x", "number"), ("step", "unknown")]

    def test_comparison(self):
        assert refs("user.age > 18 and user.name") == [
            ("user.age", "number"),
            ("user.name", "boolean"),
        ]

    def test_arithmetic(self):
        assert refs("price * quantity") == [("price", "number"), ("quantity", "number")]
        assert refs("x % 2") == [("x", "number")]

    def test_concatenation(self):
        assert refs("'Hello ' ~ name") == [("name", "string")]

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("total + 1", "number"),
            ("label + '!'", "string"),
            ("a + b", "unknown"),
        ],
    )
    def test_plus(self, text, expected):
        """'+' takes the type of a literal on the other side, if any."""
        assert refs(text)[0][1] == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("status == 'active'", "string"),
            ("count == 3", "number"),
            ("flag != true", "boolean"),
            ("x == none", "null"),
            ("a == b", "unknown"),
        ],
    )
    def test_equality(self, text, expected):
        """Equality against a literal takes the literal's type."""
        assert refs(text)[0][1] == expected

    def test_string_formatting(self):
        """The right side of '%' formatting has no known type."""
        assert refs("'%s items' % count") == [("count", "unknown")]

    def test_membership_gives_no_usage(self):
        assert refs("x in allowed") == [("x", "unknown"), ("allowed", "unknown")]

    def test_negation_and_minus(self):
        assert refs("not enabled") == [("enabled", "boolean")]
        assert refs("-offset") == [("offset", "number")]

    def test_ternary(self):
        assert refs("'Active' if is_active else 'Inactive'") == [("is_active", "boolean")]
        assert refs("a if b else c") == [
            ("a", "unknown"),
            ("b", "boolean"),
            ("c", "unknown"),
        ]

    def test_grouped_arithmetic(self):
        """Usage flows into a parenthesized group."""
        assert refs("(stats.success / stats.total * 100) | round(2)") == [
            ("stats.success", "number"),
            ("stats.total", "number"),
        ]


class TestRoles:
    def test_iterable_role(self):
        parsed = parse_expression("users", Role.ITERABLE)
        assert parsed.references[0].usage.value == "array"
        assert str(parsed.source) == "users"

    def test_condition_role(self):
        assert refs("user", Role.CONDITION) == [("user", "boolean")]

    def test_role_only_applies_to_sole_operand(self):
        assert refs("a ~ b", Role.CONDITION) == [("a", "string"), ("b", "string")]

    def test_group_is_transparent(self):
        assert str(parse_expression("(items)", Role.ITERABLE).source) == "items"

    def test_element_preserving_filters_keep_source(self):
        parsed = parse_expression("users | selectattr('active') | sort", Role.ITERABLE)
        assert str(parsed.source) == "users"
        assert parsed.references[0].usage.value == "array"

    def test_transforming_filter_drops_source(self):
        parsed = parse_expression("users | map(attribute='name')", Role.ITERABLE)
        assert parsed.source is None
        assert parsed.references[0].usage.value == "array"

    def test_method_call_drops_source(self):
        assert parse_expression("data.items()", Role.ITERABLE).source is None

    def test_mapping_items_entry(self):
        parsed = parse_expression("data.items()", Role.ITERABLE)
        assert str(parsed.entry) == "data.key1"
        assert parsed.pairs

    def test_mapping_values_entry(self):
        parsed = parse_expression("data.values() | sort", Role.ITERABLE)
        assert str(parsed.entry) == "data.key1"
        assert not parsed.pairs

    @pytest.mark.parametrize(
        "text", ["data.keys()", "data.items() | length", "data.get('x').items()", "a, data.items()"]
    )
    def test_no_mapping_entry(self, text):
        assert parse_expression(text, Role.ITERABLE).entry is None

    def test_slice_keeps_source(self):
        assert str(parse_expression("items[:3]", Role.ITERABLE).source) == "items"

    def test_global_source_is_dropped(self):
        assert parse_expression("range(3)", Role.ITERABLE).source is None
