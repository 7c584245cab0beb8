"""Template formula resolution."""

from .models import (
    FormulaMapping,
    FormulaMapSet,
    UnparseableFormula,
    UnresolvedTemplateRow,
    TemplateStructureError,
)
from .parser import ReferenceParser, parse_reference
from .resolver import TemplateFormulaResolver

__all__ = [
    "FormulaMapping",
    "FormulaMapSet",
    "UnparseableFormula",
    "UnresolvedTemplateRow",
    "TemplateStructureError",
    "ReferenceParser",
    "parse_reference",
    "TemplateFormulaResolver",
]
