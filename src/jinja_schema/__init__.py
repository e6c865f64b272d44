"""jinja_schema: infer the data a Jinja template expects.

Reads template source statically (nothing is rendered) and reports which
names must be supplied from outside, together with a structural shape for
each: scalar type, array, or nested object.

Quickstart:
    >>> from jinja_schema import extract_schema
    >>> schema = extract_schema(
    ...     "{% for u in users %}{{ u.name }} ({{ u.age }}){% endfor %}"
    ...     "{% if show_footer %}{{ footer | upper }}{% endif %}"
    ... )
    >>> schema.to_sample()
    {'users': [{'name': '', 'age': 0}], 'show_footer': False, 'footer': ''}

Architecture:
Template Source → Lexer → Segments → Statement/Expression parsers → Walker → Schema

Pipeline stages:
1. **Lexer**: Splits source into literal, expression, statement and comment segments
2. **Statement parser**: Classifies ``{% %}`` tags and extracts role-tagged sub-expressions
3. **Expression parser**: Extracts access paths and the usage each implies
4. **Walker**: Tracks scopes, resolves loop aliases and folds paths into shapes

Robustness:
Malformed template syntax never raises. Unclosed delimiters, unknown tags
and unparsable expressions degrade to partial extraction and are reported
as diagnostics on ``analyze_template()`` results.

Thread-Safety:
All public APIs are pure functions over immutable lookup tables; every call
builds its own lexer, scope stack and schema builder.

Free-Threading (PEP 703):
Declares GIL-independence via `_Py_mod_gil = 0` attribute.

"""

from jinja_schema._types import Segment, SegmentKind
from jinja_schema.analysis import (
    DEFAULT_CONFIG,
    ExtractionConfig,
    SchemaWalker,
    TemplateAnalysis,
    TemplateDependency,
    analyze_template,
    extract_schema,
)
from jinja_schema.exceptions import Diagnostic, ErrorCode, LineRangeError, SchemaError
from jinja_schema.lexer import tokenize
from jinja_schema.nodes import (
    AccessPath,
    Array,
    Object,
    Reference,
    Role,
    Scalar,
    ScalarType,
    Shape,
    Statement,
    Tag,
    Usage,
)
from jinja_schema.parser import ParsedExpression, parse_expression, parse_statement
from jinja_schema.sample import is_placeholder, merge_samples
from jinja_schema.schema import VariableSchema
from jinja_schema.utils.text import slice_lines

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "AccessPath",
    "Array",
    "Diagnostic",
    "ErrorCode",
    "ExtractionConfig",
    "LineRangeError",
    "Object",
    "ParsedExpression",
    "Reference",
    "Role",
    "Scalar",
    "ScalarType",
    "SchemaError",
    "SchemaWalker",
    "Segment",
    "SegmentKind",
    "Shape",
    "Statement",
    "Tag",
    "TemplateAnalysis",
    "TemplateDependency",
    "Usage",
    "VariableSchema",
    "__version__",
    "analyze_template",
    "extract_schema",
    "is_placeholder",
    "merge_samples",
    "parse_expression",
    "parse_statement",
    "slice_lines",
    "tokenize",
]


# Free-threading declaration (PEP 703)
def __getattr__(name: str) -> object:
    """Module-level getattr for free-threading declaration."""
    if name == "_Py_mod_gil":
        # Signal: this module is safe for free-threading
        # 0 = Py_MOD_GIL_NOT_USED
        return 0
    raise AttributeError(f"module 'jinja_schema' has no attribute {name!r}")
