"""Immutable workbook snapshots loaded with openpyxl."""

import datetime
import logging
import zipfile
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .cells import column_to_index, parse_address
from .models import CellReference, WorkbookReadError

logger = logging.getLogger(__name__)


def cell_text(value: Any) -> Optional[str]:
    """Render a raw cell value as trimmed text, or None when the cell is empty."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def _plain_value(value: Any) -> Any:
    # Array and data-table formulas are objects carrying the formula in `.text`
    if value is not None and not isinstance(value, (str, int, float, bool, datetime.date, datetime.time)):
        text = getattr(value, "text", None)
        if isinstance(text, str):
            return text
    return value


class TabSnapshot:
    """Values of one tab, addressed by 1-based row and 0-based column."""

    def __init__(self, name: str, rows: list[tuple]):
        self.name = name
        self._rows = tuple(tuple(row) for row in rows)

        last = 0
        for idx, row in enumerate(self._rows, start=1):
            if any(cell_text(v) is not None for v in row):
                last = idx
        self.max_row = last
        self.max_column = max((len(r) for r in self._rows), default=0)

    def raw(self, row: int, col_index: int) -> Any:
        if row < 1 or row > len(self._rows):
            return None
        values = self._rows[row - 1]
        if col_index < 0 or col_index >= len(values):
            return None
        return values[col_index]

    def text(self, row: int, col_index: int) -> Optional[str]:
        return cell_text(self.raw(row, col_index))

    def raw_cell(self, address: str) -> Any:
        col, row = parse_address(address)
        return self.raw(row, column_to_index(col))

    def cell(self, address: str) -> Optional[str]:
        """Text of the cell at an A1 address, None if empty or out of range."""
        return cell_text(self.raw_cell(address))

    def row_values(self, row: int) -> tuple:
        if row < 1 or row > len(self._rows):
            return ()
        return self._rows[row - 1]

    def iter_rows(self, start_row: int = 1) -> Iterator[tuple[int, tuple]]:
        """Yield (row_number, values) up to the last populated row."""
        for row in range(max(start_row, 1), self.max_row + 1):
            yield row, self._rows[row - 1]


class WorkbookSnapshot:
    """Read-only view over every worksheet of a workbook."""

    def __init__(self, name: str, tabs: list[TabSnapshot]):
        self.name = name
        self._tabs = {tab.name: tab for tab in tabs}
        self._folded = {}
        for tab in tabs:
            self._folded.setdefault(tab.name.casefold(), tab)

    @property
    def sheet_names(self) -> list[str]:
        return list(self._tabs)

    def tab(self, name: str) -> Optional[TabSnapshot]:
        """Find a tab by name, ignoring surrounding quotes, then case."""
        cleaned = name.strip()
        if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] == "'":
            cleaned = cleaned[1:-1].replace("''", "'")
        found = self._tabs.get(cleaned)
        if found is None:
            found = self._folded.get(cleaned.casefold())
        return found

    def read(self, ref: CellReference) -> Optional[str]:
        """Dereference a cell; a missing tab or empty cell gives None."""
        tab = self.tab(ref.sheet_name)
        if tab is None:
            return None
        return tab.cell(ref.cell_address)

    @classmethod
    def from_openpyxl(cls, workbook, name: str = "<memory>") -> "WorkbookSnapshot":
        tabs = []
        for ws in workbook.worksheets:
            rows = [
                tuple(_plain_value(v) for v in row)
                for row in ws.iter_rows(min_row=1, min_col=1, values_only=True)
            ]
            tabs.append(TabSnapshot(ws.title, rows))
        return cls(name, tabs)

    @classmethod
    def load(cls, path: Union[str, Path], formulas: bool = False) -> "WorkbookSnapshot":
        """
        Open an .xlsx file and snapshot all worksheets.

        Args:
            path: Workbook file
            formulas: Keep formula text instead of cached values

        Raises:
            WorkbookReadError: The file is missing, not a workbook, or corrupt
        """
        path = Path(path)
        try:
            workbook = openpyxl.load_workbook(path, data_only=not formulas)
        except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError, TypeError, SyntaxError) as e:
            raise WorkbookReadError(str(path), str(e) or e.__class__.__name__) from e

        try:
            snapshot = cls.from_openpyxl(workbook, name=path.name)
        finally:
            workbook.close()

        logger.debug(f"Loaded workbook '{path.name}' with tabs: {', '.join(snapshot.sheet_names)}")
        return snapshot
