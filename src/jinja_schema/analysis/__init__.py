"""Template analysis: scope tracking, shape building and the extraction walker."""

from jinja_schema.analysis.builder import SchemaBuilder, apply_name_hints, shape_for_path
from jinja_schema.analysis.config import DEFAULT_CONFIG, ExtractionConfig
from jinja_schema.analysis.hints import hint_for
from jinja_schema.analysis.metadata import TemplateAnalysis, TemplateDependency
from jinja_schema.analysis.scope import Scope, ScopeKind, ScopeTracker
from jinja_schema.analysis.walker import SchemaWalker, analyze_template, extract_schema

__all__ = [
    "DEFAULT_CONFIG",
    "ExtractionConfig",
    "SchemaBuilder",
    "SchemaWalker",
    "Scope",
    "ScopeKind",
    "ScopeTracker",
    "TemplateAnalysis",
    "TemplateDependency",
    "analyze_template",
    "apply_name_hints",
    "extract_schema",
    "hint_for",
    "shape_for_path",
]
