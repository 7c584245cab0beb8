"""Workbook access: A1 helpers and openpyxl-backed snapshots."""

from .cells import column_to_index, index_to_column, parse_address, normalize_address
from .models import CellReference, WorkbookReadError
from .reader import TabSnapshot, WorkbookSnapshot, cell_text

__all__ = [
    "column_to_index",
    "index_to_column",
    "parse_address",
    "normalize_address",
    "CellReference",
    "WorkbookReadError",
    "TabSnapshot",
    "WorkbookSnapshot",
    "cell_text",
]
