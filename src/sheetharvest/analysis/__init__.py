"""Advisory structure analysis for new templates."""

from .structure import ColumnStats, TabAnalysis, TemplateStructureAnalyzer

__all__ = ["ColumnStats", "TabAnalysis", "TemplateStructureAnalyzer"]
