"""Result types for template analysis."""

from __future__ import annotations

from dataclasses import dataclass

from jinja_schema.exceptions import Diagnostic, ErrorCode
from jinja_schema.schema import VariableSchema


@dataclass(frozen=True, slots=True)
class TemplateDependency:
    """A template referenced by ``extends``, ``include``, ``import`` or ``from``.

    Only literal paths are recorded; the referenced file is never read.
    """

    tag: str
    template: str
    offset: int = 0


@dataclass(frozen=True, slots=True)
class TemplateAnalysis:
    """Everything one analysis pass learned about a template.

    Attributes:
        schema: Free variables and their inferred shapes
        diagnostics: Recoverable problems, ordered by offset
        dependencies: Cross-file references, in source order
    """

    schema: VariableSchema
    diagnostics: tuple[Diagnostic, ...] = ()
    dependencies: tuple[TemplateDependency, ...] = ()

    @property
    def is_clean(self) -> bool:
        """True when the template was analyzed without degradation."""
        return not self.diagnostics

    def diagnostics_for(self, code: ErrorCode) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.code is code]

    @property
    def templates(self) -> list[str]:
        """Referenced template paths, deduplicated, in source order."""
        return list(dict.fromkeys(dep.template for dep in self.dependencies))
