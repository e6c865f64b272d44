"""Shared lookup tables for jinja_schema.

Every table is a module-level frozenset so the engine can be called
concurrently without any shared mutable state.
"""

from __future__ import annotations

# Words that are syntax in expressions, never variable names. Modifiers such as
# ``recursive`` or ``ignore missing`` are only reserved where their statement
# expects them and are stripped by the statement parser.
KEYWORDS: frozenset[str] = frozenset(
    {
        # Statement keywords
        "for",
        "endfor",
        "if",
        "elif",
        "else",
        "endif",
        "set",
        "endset",
        "block",
        "endblock",
        "extends",
        "include",
        "import",
        "from",
        "macro",
        "endmacro",
        "call",
        "endcall",
        "filter",
        "endfilter",
        "with",
        "endwith",
        "autoescape",
        "endautoescape",
        "raw",
        "endraw",
        "trans",
        "endtrans",
        "pluralize",
        # Operators spelled as words
        "and",
        "or",
        "not",
        "in",
        "is",
        # Literals
        "true",
        "false",
        "none",
        "null",
        "True",
        "False",
        "None",
        "NULL",
    }
)

# Literal words and the placeholder kind they carry
BOOLEAN_LITERALS: frozenset[str] = frozenset({"true", "false", "True", "False"})
NONE_LITERALS: frozenset[str] = frozenset({"none", "None", "null", "NULL"})

# Names the rendering environment always provides (not context variables)
GLOBAL_NAMES: frozenset[str] = frozenset(
    {
        # Jinja default globals
        "range",
        "lipsum",
        "dict",
        "cycler",
        "joiner",
        "namespace",
        # Special names inside loops, macros and blocks
        "loop",
        "super",
        "caller",
        "varargs",
        "kwargs",
        "self",
    }
)

# Built-in methods that may be called on a variable receiver.
# The method name is never part of the access path.
OBJECT_METHODS: frozenset[str] = frozenset(
    {"items", "keys", "values", "get", "update", "setdefault"}
)
ARRAY_METHODS: frozenset[str] = frozenset(
    {"append", "extend", "insert", "remove", "sort", "reverse"}
)
STRING_METHODS: frozenset[str] = frozenset(
    {
        "split",
        "rsplit",
        "splitlines",
        "join",
        "upper",
        "lower",
        "title",
        "capitalize",
        "casefold",
        "swapcase",
        "strip",
        "lstrip",
        "rstrip",
        "startswith",
        "endswith",
        "replace",
        "format",
        "format_map",
        "find",
        "rfind",
        "zfill",
        "center",
        "ljust",
        "rjust",
        "partition",
        "rpartition",
        "removeprefix",
        "removesuffix",
        "expandtabs",
        "encode",
        "isdigit",
        "isalpha",
        "isalnum",
        "isspace",
        "islower",
        "isupper",
    }
)
NEUTRAL_METHODS: frozenset[str] = frozenset({"pop", "copy", "clear", "count", "index"})
BUILTIN_METHODS: frozenset[str] = (
    OBJECT_METHODS | ARRAY_METHODS | STRING_METHODS | NEUTRAL_METHODS
)

# Filters grouped by the shape they imply for their input
STRING_FILTERS: frozenset[str] = frozenset(
    {
        "capitalize",
        "center",
        "format",
        "indent",
        "lower",
        "replace",
        "striptags",
        "title",
        "trim",
        "truncate",
        "upper",
        "urlize",
        "wordcount",
        "wordwrap",
    }
)
ARRAY_FILTERS: frozenset[str] = frozenset(
    {
        "length",
        "count",
        "join",
        "first",
        "last",
        "sort",
        "reverse",
        "unique",
        "batch",
        "slice",
        "map",
        "select",
        "reject",
        "selectattr",
        "rejectattr",
        "groupby",
        "sum",
        "min",
        "max",
        "random",
        "list",
    }
)
OBJECT_FILTERS: frozenset[str] = frozenset({"dictsort", "items", "xmlattr"})
NUMBER_FILTERS: frozenset[str] = frozenset({"round", "abs", "filesizeformat"})

# Filters that say nothing about their input; inference looks past them
NEUTRAL_FILTERS: frozenset[str] = frozenset(
    {
        "default",
        "d",
        "e",
        "escape",
        "forceescape",
        "safe",
        "string",
        "int",
        "float",
        "bool",
        "tojson",
        "pprint",
        "urlencode",
    }
)

# Filters whose output iterates over the same elements as their input
ELEMENT_PRESERVING_FILTERS: frozenset[str] = frozenset(
    {
        "sort",
        "reverse",
        "unique",
        "list",
        "select",
        "reject",
        "selectattr",
        "rejectattr",
        "default",
        "d",
    }
)

# Tests grouped by the shape they imply
NUMBER_TESTS: frozenset[str] = frozenset(
    {
        "number",
        "integer",
        "float",
        "odd",
        "even",
        "divisibleby",
        "gt",
        "ge",
        "lt",
        "le",
        "greaterthan",
        "lessthan",
    }
)
STRING_TESTS: frozenset[str] = frozenset({"string", "lower", "upper"})
OBJECT_TESTS: frozenset[str] = frozenset({"mapping"})
ARRAY_TESTS: frozenset[str] = frozenset({"sequence", "iterable"})
BOOLEAN_TESTS: frozenset[str] = frozenset({"boolean", "true", "false"})

# Binary operators
COMPARISON_OPERATORS: frozenset[str] = frozenset({">", ">=", "<", "<="})
ARITHMETIC_OPERATORS: frozenset[str] = frozenset({"-", "*", "/", "//", "%", "**"})
EQUALITY_OPERATORS: frozenset[str] = frozenset({"==", "!="})
BOOLEAN_OPERATORS: frozenset[str] = frozenset({"and", "or"})
BINARY_OPERATORS: frozenset[str] = (
    COMPARISON_OPERATORS
    | ARITHMETIC_OPERATORS
    | EQUALITY_OPERATORS
    | BOOLEAN_OPERATORS
    | frozenset({"+", "~", "in", "not in"})
)
