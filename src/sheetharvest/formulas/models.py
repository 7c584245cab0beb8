"""Data models for template formula mappings."""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from ..exceptions import SheetHarvestError
from ..workbook.models import CellReference

logger = logging.getLogger(__name__)


class UnparseableFormula(BaseModel):
    """A formula that is not a single sheet!cell reference."""

    model_config = ConfigDict(frozen=True)

    formula: str
    reason: str


class FormulaMapping(BaseModel):
    """Where the answer to one question lives in a filled workbook."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    primary_cell: CellReference
    secondary_cells: tuple[CellReference, ...] = ()  # left-to-right, for list-style answers
    label: Optional[str] = None  # question text from the template, truncated
    template_row: Optional[int] = None


class UnresolvedTemplateRow(BaseModel):
    """A template row whose primary answer formula could not be parsed."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    template_row: int
    formula: str
    reason: str


class FormulaMapSet(BaseModel):
    """All formula mappings derived from one reference template version."""

    model_config = ConfigDict(frozen=True)

    template_version: str = ""
    source_sheet: str = ""
    mappings: tuple[FormulaMapping, ...] = ()
    unresolved: tuple[UnresolvedTemplateRow, ...] = ()

    def get(self, question_id: str) -> Optional[FormulaMapping]:
        for mapping in self.mappings:
            if mapping.question_id == question_id:
                return mapping
        return None

    def by_sheet(self) -> dict[str, int]:
        """Count mappings per source tab (primary cells only)."""
        counts: dict[str, int] = {}
        for mapping in self.mappings:
            name = mapping.primary_cell.sheet_name
            counts[name] = counts.get(name, 0) + 1
        return counts

    def save(self, path: Union[str, Path]) -> Path:
        """Serialize the set as JSON so the template scan runs once per version."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Saved {len(self.mappings)} formula mappings to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FormulaMapSet":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.model_validate(data)
        except (OSError, ValueError) as e:
            raise TemplateStructureError(f"Cannot load formula map '{path}': {e}") from e


class TemplateStructureError(SheetHarvestError):
    """Raised when a reference template or cached formula map is unusable."""

    pass


ParseOutcome = Union[CellReference, UnparseableFormula]

