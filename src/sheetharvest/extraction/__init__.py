"""Answer extraction from filled workbooks."""

from .models import (
    Diagnostic,
    DiagnosticKind,
    ValueKind,
    ParsedAnswer,
    ListTableRow,
    ExtractionResult,
    FileFailure,
    BatchResult,
)
from .coercion import coerce_value
from .extractor import ExtractionContext, SpreadsheetExtractor
from .batch import BatchExtractor

__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "ValueKind",
    "ParsedAnswer",
    "ListTableRow",
    "ExtractionResult",
    "FileFailure",
    "BatchResult",
    "coerce_value",
    "ExtractionContext",
    "SpreadsheetExtractor",
    "BatchExtractor",
]
