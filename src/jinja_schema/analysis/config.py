"""Configuration for schema extraction."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ExtractionConfig:
    """Options for one extraction pass.

    Attributes:
        raw_is_inert: Treat ``{% raw %}`` bodies as literal text. When False,
            markup inside raw blocks is analyzed like any other markup.
        name_hints: Type scalars left ``unknown`` after usage analysis from
            their names (``age`` is a number, ``is_admin`` a boolean).
        extra_globals: Names the rendering environment provides in addition
            to the Jinja defaults. They are never reported as variables.

    Example:
        >>> from jinja_schema import extract_schema
        >>> config = ExtractionConfig(extra_globals=frozenset({"url_for", "request"}))
        >>> extract_schema("{{ url_for('home') }} {{ title }}", config).keys()
        dict_keys(['title'])
    """

    raw_is_inert: bool = True
    name_hints: bool = True
    extra_globals: frozenset[str] = frozenset()


# Default configuration
DEFAULT_CONFIG = ExtractionConfig()
