"""Resolve a reference template's answer formulas into question→cell mappings."""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from ..config import settings
from ..workbook.cells import column_to_index, index_to_column
from ..workbook.models import CellReference
from ..workbook.reader import WorkbookSnapshot
from .models import (
    FormulaMapping,
    FormulaMapSet,
    TemplateStructureError,
    UnparseableFormula,
    UnresolvedTemplateRow,
)
from .parser import ReferenceParser

logger = logging.getLogger(__name__)

LABEL_MAX_CHARS = 100


def _formula_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.lstrip().startswith("="):
        return value.strip()
    return None


class TemplateFormulaResolver:
    """
    Scans the index tab of a blank template.

    Each indexed row carries a stable question identifier; its answer column and
    the run of columns after it hold formulas such as `='Food Contact'!G9`
    that point at the cell a submitter fills in.
    """

    def __init__(
        self,
        index_sheet: Optional[str] = None,
        index_column: Optional[str] = None,
        label_column: Optional[str] = None,
        first_row: Optional[int] = None,
        answer_column: Optional[str] = None,
        secondary_columns: Optional[int] = None,
        parser: Optional[ReferenceParser] = None,
    ):
        self.index_sheet = index_sheet or settings.template_index_sheet
        self.index_column = index_column or settings.template_index_column
        self.label_column = label_column or settings.template_label_column
        self.first_row = first_row or settings.template_first_row
        self.answer_column = answer_column or settings.template_answer_column
        self.secondary_columns = (
            settings.template_secondary_columns if secondary_columns is None else secondary_columns
        )
        self.parser = parser or ReferenceParser()

    @property
    def secondary_column_letters(self) -> list[str]:
        start = column_to_index(self.answer_column) + 1
        return [index_to_column(start + i) for i in range(self.secondary_columns)]

    def resolve(self, template: WorkbookSnapshot, template_version: str = "") -> FormulaMapSet:
        """
        Build the formula mapping set for a template snapshot.

        The snapshot must carry formula text (loaded with formulas=True).

        Raises:
            TemplateStructureError: The index tab is missing
        """
        tab = template.tab(self.index_sheet)
        if tab is None:
            raise TemplateStructureError(
                f"Index tab '{self.index_sheet}' not found in template '{template.name}' "
                f"(tabs: {', '.join(template.sheet_names)})"
            )

        index_idx = column_to_index(self.index_column)
        label_idx = column_to_index(self.label_column)
        answer_idx = column_to_index(self.answer_column)

        mappings: list[FormulaMapping] = []
        unresolved: list[UnresolvedTemplateRow] = []
        seen: set[str] = set()

        for row, _ in tab.iter_rows(self.first_row):
            question_id = tab.text(row, index_idx)
            if not question_id:
                continue

            formula = _formula_text(tab.raw(row, answer_idx))
            if formula is None:
                logger.debug(f"Template row {row} ({question_id}) has no answer formula")
                continue

            outcome = self.parser.parse(formula)
            if isinstance(outcome, UnparseableFormula):
                logger.warning(
                    f"Dropping template row {row} ({question_id}): {outcome.reason}: {formula}"
                )
                unresolved.append(
                    UnresolvedTemplateRow(
                        question_id=question_id,
                        template_row=row,
                        formula=formula,
                        reason=outcome.reason,
                    )
                )
                continue

            if question_id in seen:
                logger.warning(f"Duplicate question id '{question_id}' at template row {row}, keeping first")
                continue
            seen.add(question_id)

            label = tab.text(row, label_idx)
            mappings.append(
                FormulaMapping(
                    question_id=question_id,
                    primary_cell=outcome,
                    secondary_cells=tuple(self._secondary_references(tab, row, answer_idx)),
                    label=label[:LABEL_MAX_CHARS] if label else None,
                    template_row=row,
                )
            )

        logger.info(
            f"Resolved {len(mappings)} formula mappings from '{template.name}' "
            f"({len(unresolved)} unparseable)"
        )
        return FormulaMapSet(
            template_version=template_version,
            source_sheet=tab.name,
            mappings=tuple(mappings),
            unresolved=tuple(unresolved),
        )

    def resolve_file(
        self, path: Union[str, Path], template_version: Optional[str] = None
    ) -> FormulaMapSet:
        """Load a template .xlsx with formulas and resolve it."""
        path = Path(path)
        template = WorkbookSnapshot.load(path, formulas=True)
        return self.resolve(template, template_version=template_version or path.stem)

    def _secondary_references(self, tab, row: int, answer_idx: int) -> list[CellReference]:
        references = []
        for offset in range(1, self.secondary_columns + 1):
            formula = _formula_text(tab.raw(row, answer_idx + offset))
            if formula is None:
                continue
            outcome = self.parser.parse(formula)
            if isinstance(outcome, UnparseableFormula):
                logger.warning(
                    f"Dropping secondary formula at {index_to_column(answer_idx + offset)}{row}: "
                    f"{outcome.reason}: {formula}"
                )
                continue
            references.append(outcome)
        return references
