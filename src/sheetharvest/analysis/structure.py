"""Structure analysis for templates that have no layout yet."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..layouts.models import TabLayout
from ..workbook.cells import column_to_index, index_to_column
from ..workbook.reader import TabSnapshot, WorkbookSnapshot, cell_text

logger = logging.getLogger(__name__)


@dataclass
class ColumnStats:
    """Fill statistics for one column of a tab."""

    column: str
    non_empty: int
    average_length: float


@dataclass
class TabAnalysis:
    """Result of analyzing one tab."""

    tab_name: str
    max_row: int
    columns: list[ColumnStats]  # longest average text first
    header_rows: list[int]
    suggested_layout: Optional[TabLayout] = None
    notes: list[str] = field(default_factory=list)

    @property
    def question_column(self) -> Optional[str]:
        return self.columns[0].column if self.columns else None


class TemplateStructureAnalyzer:
    """
    Proposes TabLayout skeletons for an unconfigured template.

    Advisory only: the suggestions are a starting point for a curated layout
    and are never used by extraction.
    """

    def __init__(self, header_max_length: int = 50, max_header_cells: int = 2):
        self.header_max_length = header_max_length
        self.max_header_cells = max_header_cells

    def analyze(self, workbook: WorkbookSnapshot) -> list[TabAnalysis]:
        analyses = []
        for name in workbook.sheet_names:
            analyses.append(self.analyze_tab(workbook.tab(name)))
        return analyses

    def analyze_tab(self, tab: TabSnapshot) -> TabAnalysis:
        columns = self.column_stats(tab)
        headers = self.header_candidates(tab)
        analysis = TabAnalysis(tab_name=tab.name, max_row=tab.max_row, columns=columns, header_rows=headers)

        if not columns:
            analysis.notes.append("tab is empty")
            return analysis

        analysis.suggested_layout = self.suggest_layout(tab, columns, headers, analysis.notes)
        logger.debug(f"Analyzed tab '{tab.name}': {len(columns)} columns, {len(headers)} header candidates")
        return analysis

    def column_stats(self, tab: TabSnapshot) -> list[ColumnStats]:
        """Non-empty counts and average text length, longest average first."""
        stats = []
        for col_index in range(tab.max_column):
            lengths = []
            for row, _ in tab.iter_rows():
                text = tab.text(row, col_index)
                if text is not None:
                    lengths.append(len(text))
            if lengths:
                stats.append(
                    ColumnStats(
                        column=index_to_column(col_index),
                        non_empty=len(lengths),
                        average_length=sum(lengths) / len(lengths),
                    )
                )
        # sorted() is stable, so equal averages keep left-to-right order
        return sorted(stats, key=lambda s: s.average_length, reverse=True)

    def header_candidates(self, tab: TabSnapshot) -> list[int]:
        """Rows with one or two short non-empty cells and no question mark."""
        rows = []
        for row, values in tab.iter_rows():
            texts = [t for t in (cell_text(v) for v in values) if t is not None]
            if not texts or len(texts) > self.max_header_cells:
                continue
            if all(len(t) < self.header_max_length and "?" not in t for t in texts):
                rows.append(row)
        return rows

    def suggest_layout(
        self,
        tab: TabSnapshot,
        columns: list[ColumnStats],
        headers: list[int],
        notes: Optional[list[str]] = None,
    ) -> TabLayout:
        """
        Build a TabLayout skeleton.

        The longest-text column becomes the question column and the nearest
        filled column to its right the answer column. Scanning starts at the
        first row with question text that is not a header candidate.
        """
        notes = notes if notes is not None else []
        question_column = columns[0].column
        question_index = column_to_index(question_column)

        filled = sorted(column_to_index(s.column) for s in columns)
        right = [i for i in filled if i > question_index]
        if right:
            answer_index = right[0]
        else:
            answer_index = question_index + 1
            notes.append("no filled column right of the question column; answer column guessed")

        header_set = set(headers)
        start_row = 1
        for row, _ in tab.iter_rows():
            if row not in header_set and tab.text(row, question_index) is not None:
                start_row = row
                break

        return TabLayout(
            tab_name=tab.name,
            question_column=question_column,
            question_text_start_row=start_row,
            answer_column=index_to_column(answer_index),
            answer_start_row=start_row,
            section_header_rows=tuple(r for r in headers if r >= start_row),
        )

    def report(self, analyses: list[TabAnalysis]) -> str:
        """Plain-text summary for a human reviewer."""
        lines = []
        for analysis in analyses:
            lines.append(f"=== {analysis.tab_name} ({analysis.max_row} rows) ===")
            for stats in analysis.columns:
                lines.append(
                    f"  {stats.column:>3}: {stats.non_empty:4d} filled, avg length {stats.average_length:.1f}"
                )
            if analysis.header_rows:
                lines.append(f"  Section header candidates: {', '.join(str(r) for r in analysis.header_rows)}")
            layout = analysis.suggested_layout
            if layout is not None:
                lines.append(
                    f"  Suggested: questions in {layout.question_column}, answers in {layout.answer_column}, "
                    f"from row {layout.answer_start_row}"
                )
            for note in analysis.notes:
                lines.append(f"  Note: {note}")
            lines.append("")
        return "\n".join(lines)
