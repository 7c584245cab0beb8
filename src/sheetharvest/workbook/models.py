"""Data models for workbook access."""

import re

from pydantic import BaseModel, ConfigDict, field_validator

from ..exceptions import SheetHarvestError
from .cells import normalize_address

_BARE_SHEET_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class CellReference(BaseModel):
    """A single-cell reference into a named tab, e.g. 'Food Contact'!G9."""

    model_config = ConfigDict(frozen=True)

    sheet_name: str
    cell_address: str  # A1 notation without `$` markers

    @field_validator("cell_address")
    @classmethod
    def validate_cell_address(cls, v: str) -> str:
        return normalize_address(v)

    @property
    def notation(self) -> str:
        """Render the reference the way a spreadsheet formula would."""
        if _BARE_SHEET_NAME.match(self.sheet_name):
            return f"{self.sheet_name}!{self.cell_address}"
        escaped = self.sheet_name.replace("'", "''")
        return f"'{escaped}'!{self.cell_address}"

    def __str__(self) -> str:
        return self.notation


class WorkbookReadError(SheetHarvestError):
    """Raised when a workbook file cannot be opened or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read workbook '{path}': {reason}")
