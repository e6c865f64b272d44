"""Name-based type hints for variables with no usage signal.

Only applied to scalars still ``unknown`` after usage analysis, so any
signal from the template itself always wins over a name.
"""

from __future__ import annotations

import re

from jinja_schema.nodes import ScalarType

_NUMBER_RE = re.compile(
    r"""^(?:
        (?:count|total|num|number|quantity|qty|amount|size|length)(?:_.*|s)?
      | price|cost|subtotal|fee|rate|salary|budget|balance|revenue|tax|discount
      | (?:percent|percentage|pct|ratio|progress)(?:_.*)?
      | age|years?|port|replicas?|instances|workers|cores|score|rank|rating
      | .+_(?:count|total|num|amount|price|cost|size|qty|age|score|percent)
    )$""",
    re.IGNORECASE | re.VERBOSE,
)

_BOOLEAN_RE = re.compile(
    r"""^(?:
        (?:is|has|can|should|will|did|was|show|hide|enable|disable|allow)(?:_|[A-Z]).*
      | active|enabled|disabled|visible|hidden|checked|selected|valid|verified
      | confirmed|published|deleted|archived|debug|flag|agree|opt_?in
    )$""",
    re.VERBOSE,
)


def hint_for(name: str | None) -> ScalarType:
    """Scalar type suggested by a variable or field name, or UNKNOWN.

    Example:
        >>> hint_for("age"), hint_for("is_admin"), hint_for("title")
        (<ScalarType.NUMBER: 'number'>, <ScalarType.BOOLEAN: 'boolean'>, <ScalarType.UNKNOWN: 'unknown'>)
    """
    if not name:
        return ScalarType.UNKNOWN
    if _BOOLEAN_RE.match(name) or _BOOLEAN_RE.match(name.lower()):
        return ScalarType.BOOLEAN
    if _NUMBER_RE.match(name):
        return ScalarType.NUMBER
    return ScalarType.UNKNOWN
