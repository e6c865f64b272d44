"""Shared hypothesis strategies for jinja_schema property-based testing.

Provides reusable strategies that generate template inputs at two levels:

- **Lexer**: Fragments with valid delimiter patterns, and arbitrary text
- **Scopes**: Identifiers and loop templates with known free variables

These are building blocks -- individual test modules compose them into
property-specific strategies.
"""

from __future__ import annotations

from hypothesis import strategies as st

from jinja_schema.utils.constants import GLOBAL_NAMES, KEYWORDS

# ---------------------------------------------------------------------------
# Lexer strategies
# ---------------------------------------------------------------------------

# Plain text without any template delimiters
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),  # no surrogates
        blacklist_characters="{}\x00",
    ),
    min_size=1,
    max_size=200,
)

# Words a statement may end with (``for x in items recursive``)
_STATEMENT_MODIFIERS = frozenset(
    {"as", "with", "without", "context", "ignore", "missing", "scoped", "required", "recursive"}
)

# Identifiers that are always context variables
identifier = st.from_regex(r"[a-z_][a-z0-9_]{0,12}", fullmatch=True).filter(
    lambda name: name not in KEYWORDS
    and name not in GLOBAL_NAMES
    and name not in _STATEMENT_MODIFIERS
)

template_variable = identifier.map(lambda name: f"{{{{ {name} }}}}")

_comment_body = st.from_regex(r"[a-zA-Z0-9_ ]{0,30}", fullmatch=True)
template_comment = _comment_body.map(lambda body: f"{{# {body} #}}")

# Plain text interleaved with variables and comments
template_fragment = st.lists(
    st.one_of(plain_text, template_variable, template_comment),
    min_size=1,
    max_size=6,
).map("".join)

# Arbitrary text that might stress the lexer (fuzz-like)
arbitrary_template_source = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    min_size=0,
    max_size=300,
)

# Text biased toward delimiter characters and quotes
delimiter_soup = st.text(
    alphabet=st.sampled_from(list("{}%#-+'\" \\abc|.[]()=")),
    min_size=0,
    max_size=120,
)

# ---------------------------------------------------------------------------
# Scope strategies
# ---------------------------------------------------------------------------

# {% for row in <collection> %}{{ row.<field> }}{% endfor %}
loop_template = st.tuples(
    identifier.filter(lambda name: name != "row"),
    identifier,
).map(
    lambda pair: (
        f"{{% for row in {pair[0]} %}}{{{{ row.{pair[1]} }}}}{{% endfor %}}",
        pair[0],
        pair[1],
    )
)
