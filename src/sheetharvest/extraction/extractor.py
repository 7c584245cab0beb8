"""Extract answers from filled supplier workbooks."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..catalog.index import QuestionIndex
from ..catalog.models import CanonicalQuestion, MatchStrategy
from ..config import settings
from ..formulas.models import FormulaMapping, FormulaMapSet
from ..layouts.models import SKIP, ListTableRegion, TabLayout
from ..layouts.registry import TabLayoutRegistry
from ..workbook.cells import column_to_index
from ..workbook.models import CellReference
from ..workbook.reader import TabSnapshot, WorkbookSnapshot
from .coercion import coerce_value
from .models import (
    Diagnostic,
    DiagnosticKind,
    ExtractionResult,
    ListTableRow,
    ParsedAnswer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionContext:
    """Read-only inputs shared by every workbook of a batch."""

    index: QuestionIndex
    layouts: TabLayoutRegistry = field(default_factory=TabLayoutRegistry.default)
    formula_map: Optional[FormulaMapSet] = None
    blank_values: frozenset[str] = field(
        default_factory=lambda: frozenset(v.casefold() for v in settings.blank_answer_values)
    )
    tags: tuple[str, ...] = ()


class SpreadsheetExtractor:
    """
    Turns one workbook snapshot into ParsedAnswers, list-table rows and diagnostics.

    Two paths run over every workbook: the formula path dereferences the
    template's FormulaMapSet, the layout path scans each configured tab row by
    row. Answers from both are reconciled per question.
    """

    def __init__(self, context: ExtractionContext):
        self.context = context

    def extract(self, workbook: WorkbookSnapshot) -> ExtractionResult:
        diagnostics: list[Diagnostic] = []

        formula_answers = self._formula_answers(workbook, diagnostics)

        layout_answers: list[ParsedAnswer] = []
        list_rows: list[ListTableRow] = []
        for layout in self.context.layouts:
            tab = workbook.tab(layout.tab_name)
            if tab is None:
                logger.warning(f"{workbook.name}: tab '{layout.tab_name}' not found")
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.MISSING_TAB,
                        message=f"Tab '{layout.tab_name}' not found in workbook",
                        tab_name=layout.tab_name,
                    )
                )
                continue

            found = self._scan_tab(tab, layout, diagnostics)
            rows = self._read_list_tables(tab, layout, diagnostics)
            logger.info(f"{workbook.name}: {tab.name} gave {len(found)} answers, {len(rows)} list rows")
            layout_answers.extend(found)
            list_rows.extend(rows)

        answers = self._reconcile(formula_answers, layout_answers, diagnostics)

        result = ExtractionResult(
            workbook=workbook.name,
            answers=answers,
            list_rows=list_rows,
            diagnostics=diagnostics,
        )
        stats = result.get_statistics()
        logger.info(
            f"{workbook.name}: {stats['total_answers']} answers, "
            f"{stats['list_table_rows']} list rows, {stats['misses']} misses"
        )
        return result

    # Formula path

    def _formula_answers(self, workbook: WorkbookSnapshot, diagnostics: list[Diagnostic]) -> list[ParsedAnswer]:
        formula_map = self.context.formula_map
        if formula_map is None:
            return []

        answers = []
        for mapping in formula_map.mappings:
            question = self.context.index.get(mapping.question_id)
            if question is None:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNKNOWN_MAPPING,
                        message=f"Formula question id '{mapping.question_id}' is not in the catalog",
                        cell=mapping.primary_cell.notation,
                    )
                )

            missing = self._missing_tabs(workbook, mapping)
            if missing:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNRESOLVED_FORMULA,
                        message=(
                            f"Question '{mapping.question_id}' refers to missing tab(s): "
                            f"{', '.join(missing)}"
                        ),
                        tab_name=missing[0],
                        cell=mapping.primary_cell.notation,
                        full_number=question.full_number if question else None,
                    )
                )

            primary = mapping.primary_cell
            tab = workbook.tab(primary.sheet_name)
            answers.append(
                self._answer(
                    question_id=mapping.question_id,
                    question=question,
                    value=self._answer_text(workbook.read(primary)),
                    secondary_values=[self._answer_text(workbook.read(ref)) for ref in mapping.secondary_cells],
                    strategy=MatchStrategy.FORMULA,
                    source_sheet=tab.name if tab is not None else primary.sheet_name,
                    source_cell=primary.cell_address,
                    note=f"formula {primary.notation}",
                )
            )
        return answers

    @staticmethod
    def _missing_tabs(workbook: WorkbookSnapshot, mapping: FormulaMapping) -> list[str]:
        missing = []
        refs: Iterable[CellReference] = (mapping.primary_cell, *mapping.secondary_cells)
        for ref in refs:
            if workbook.tab(ref.sheet_name) is None and ref.sheet_name not in missing:
                missing.append(ref.sheet_name)
        return missing

    # Layout path

    def _scan_tab(self, tab: TabSnapshot, layout: TabLayout, diagnostics: list[Diagnostic]) -> list[ParsedAnswer]:
        answers = []
        for row in range(layout.answer_start_row, tab.max_row + 1):
            if not layout.is_question_row(row):
                continue

            question_text = tab.text(row, layout.question_index)
            value = self._answer_text(tab.text(row, layout.answer_index))
            if not question_text or value is None:
                continue

            cell = f"{layout.answer_column}{row}"
            question: Optional[CanonicalQuestion] = None
            strategy = MatchStrategy.NONE
            note = ""

            target = layout.explicit_target(row)
            if target is not None:
                if target.upper() == SKIP:
                    logger.debug(f"{tab.name} row {row}: intentional skip")
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.INTENTIONAL_SKIP,
                            message=f"Row {row} is mapped to {SKIP}",
                            tab_name=tab.name,
                            row_number=row,
                            cell=cell,
                            raw_text=question_text,
                        )
                    )
                    continue

                question = self.context.index.by_full_number(target)
                if question is None:
                    logger.warning(f"{tab.name} row {row}: explicit mapping {target} is not in the catalog")
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.UNKNOWN_MAPPING,
                            message=f"Explicit mapping {target} is not in the catalog, falling back to text matching",
                            tab_name=tab.name,
                            row_number=row,
                            cell=cell,
                            raw_text=question_text,
                            full_number=target,
                        )
                    )
                else:
                    strategy = MatchStrategy.EXPLICIT
                    note = f"explicit mapping row {row} -> {target}"

            if question is None:
                match = self.context.index.match(question_text, self.context.tags)
                if not match.matched:
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.UNMATCHED_ROW,
                            message=f"No catalog question for row {row} ({match.reason})",
                            tab_name=tab.name,
                            row_number=row,
                            cell=cell,
                            raw_text=question_text,
                        )
                    )
                    continue
                question, strategy, note = match.question, match.strategy, match.confidence_note()

            comment = tab.text(row, layout.comment_index) if layout.comment_index is not None else None
            answers.append(
                self._answer(
                    question_id=question.id,
                    question=question,
                    value=value,
                    strategy=strategy,
                    source_sheet=tab.name,
                    source_cell=cell,
                    note=note,
                    row_number=row,
                    comment=comment,
                )
            )
        return answers

    def _read_list_tables(
        self, tab: TabSnapshot, layout: TabLayout, diagnostics: list[Diagnostic]
    ) -> list[ListTableRow]:
        rows = []
        for region in layout.list_tables:
            question = self._associated_question(tab, region, diagnostics)

            if region.start_row > tab.max_row:
                logger.warning(f"{tab.name}: list table {region.describe()} not found")
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.LIST_TABLE_MISSING,
                        message=f"List table {region.describe()} starts after the last populated row {tab.max_row}",
                        tab_name=tab.name,
                        row_number=region.start_row,
                        full_number=region.associated_question_id,
                    )
                )
                continue

            indices = [column_to_index(c) for c in region.data_columns]
            labels = region.labels()
            last = tab.max_row if region.end_row is None else min(region.end_row, tab.max_row)
            for row in range(region.start_row, last + 1):
                values = [self._answer_text(tab.text(row, i)) for i in indices]
                if all(v is None for v in values):
                    if region.until_blank:
                        break
                    continue
                rows.append(
                    ListTableRow(
                        tab_name=tab.name,
                        row_number=row,
                        question_id=question.id if question else None,
                        full_number=question.full_number if question else None,
                        match_strategy=MatchStrategy.EXPLICIT if question else MatchStrategy.NONE,
                        columns=list(region.data_columns),
                        labels=labels,
                        values=values,
                    )
                )
        return rows

    def _associated_question(
        self, tab: TabSnapshot, region: ListTableRegion, diagnostics: list[Diagnostic]
    ) -> Optional[CanonicalQuestion]:
        if not region.associated_question_id:
            return None
        question = self.context.index.by_full_number(region.associated_question_id)
        if question is None:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.UNKNOWN_MAPPING,
                    message=f"List table question {region.associated_question_id} is not in the catalog",
                    tab_name=tab.name,
                    row_number=region.start_row,
                    full_number=region.associated_question_id,
                )
            )
        return question

    # Shared helpers

    def _answer_text(self, value: Optional[str]) -> Optional[str]:
        """None for empty cells and blank placeholders like "0" or "n/a"."""
        if value is None or value.casefold() in self.context.blank_values:
            return None
        return value

    @staticmethod
    def _answer(
        question_id: str,
        question: Optional[CanonicalQuestion],
        value: Optional[str],
        strategy: MatchStrategy,
        source_sheet: Optional[str],
        source_cell: Optional[str],
        note: str,
        secondary_values: Optional[list[Optional[str]]] = None,
        row_number: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> ParsedAnswer:
        value_kind, typed_value = coerce_value(value, question.response_type if question else None)
        return ParsedAnswer(
            question_id=question_id,
            value=value,
            secondary_values=secondary_values or [],
            match_strategy=strategy,
            source_sheet=source_sheet,
            source_cell=source_cell,
            confidence_note=note,
            matched_full_number=(question.full_number or None) if question else None,
            row_number=row_number,
            comment=comment,
            value_kind=value_kind,
            typed_value=typed_value,
        )

    @staticmethod
    def _reconcile(
        formula_answers: list[ParsedAnswer],
        layout_answers: list[ParsedAnswer],
        diagnostics: list[Diagnostic],
    ) -> list[ParsedAnswer]:
        """One answer per question; a resolved formula answer beats a layout row."""
        answers: list[ParsedAnswer] = []
        positions: dict[str, int] = {}

        for answer in formula_answers:
            positions[answer.question_id] = len(answers)
            answers.append(answer)

        for answer in layout_answers:
            position = positions.get(answer.question_id)
            if position is None:
                positions[answer.question_id] = len(answers)
                answers.append(answer)
                continue

            kept = answers[position]
            if kept.match_strategy == MatchStrategy.FORMULA and kept.value is None:
                answers[position] = answer
                continue

            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.DUPLICATE_ANSWER,
                    message=(
                        f"Question '{answer.question_id}' already answered from "
                        f"{kept.source_sheet}!{kept.source_cell}; dropped value from "
                        f"{answer.source_sheet}!{answer.source_cell}"
                    ),
                    tab_name=answer.source_sheet,
                    row_number=answer.row_number,
                    cell=answer.source_cell,
                    raw_text=answer.value,
                    full_number=answer.matched_full_number,
                )
            )
        return answers
