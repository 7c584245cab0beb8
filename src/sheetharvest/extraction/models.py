"""Data models for extraction output."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..catalog.models import MatchStrategy


class DiagnosticKind(str, Enum):
    """Soft conditions collected while extracting a workbook."""

    MISSING_TAB = "missing_tab"  # a configured tab is absent from the workbook
    UNRESOLVED_FORMULA = "unresolved_formula"  # formula target tab is absent
    UNMATCHED_ROW = "unmatched_row"  # row text matched no catalog question
    INTENTIONAL_SKIP = "intentional_skip"  # row explicitly mapped to SKIP
    LIST_TABLE_MISSING = "list_table_missing"  # declared list table lies past the data
    UNKNOWN_MAPPING = "unknown_mapping"  # explicit/associated/formula question not in catalog
    DUPLICATE_ANSWER = "duplicate_answer"  # conflicting second answer for a question dropped


class Diagnostic(BaseModel):
    """One warning or informational note for operator review."""

    kind: DiagnosticKind
    message: str
    tab_name: Optional[str] = None
    row_number: Optional[int] = None
    cell: Optional[str] = None
    raw_text: Optional[str] = None  # question text as found, for curating explicit mappings
    full_number: Optional[str] = None


class ValueKind(str, Enum):
    """Type an answer value was coerced to, from the question's response type."""

    EMPTY = "empty"
    TEXT = "text"
    CHOICE = "choice"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class ParsedAnswer(BaseModel):
    """A single question's answer found in a workbook."""

    question_id: str
    value: Optional[str] = None
    secondary_values: list[Optional[str]] = Field(default_factory=list)
    match_strategy: MatchStrategy
    source_sheet: Optional[str] = None
    source_cell: Optional[str] = None
    confidence_note: str = ""
    matched_full_number: Optional[str] = None
    row_number: Optional[int] = None
    comment: Optional[str] = None
    value_kind: ValueKind = ValueKind.EMPTY
    typed_value: Union[bool, int, float, str, None] = None  # dates as ISO strings


class ListTableRow(BaseModel):
    """One physical row of a list-table region."""

    tab_name: str
    row_number: int
    question_id: Optional[str] = None
    full_number: Optional[str] = None
    match_strategy: MatchStrategy = MatchStrategy.NONE
    columns: list[str]
    labels: list[str]
    values: list[Optional[str]]

    def as_dict(self) -> dict[str, Optional[str]]:
        """Values keyed by column label."""
        return dict(zip(self.labels, self.values))


class ExtractionResult(BaseModel):
    """Everything extracted from one workbook."""

    workbook: str
    answers: list[ParsedAnswer] = Field(default_factory=list)
    list_rows: list[ListTableRow] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def answer_for(self, question_id: str) -> Optional[ParsedAnswer]:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    @property
    def misses(self) -> list[Diagnostic]:
        """Rows that matched nothing; intentional skips are not misses."""
        return self.diagnostics_of(DiagnosticKind.UNMATCHED_ROW)

    def get_statistics(self) -> dict:
        """Counts by match strategy and diagnostic kind."""
        strategies: dict[str, int] = {}
        for answer in self.answers:
            key = answer.match_strategy.value
            strategies[key] = strategies.get(key, 0) + 1

        kinds: dict[str, int] = {}
        for diagnostic in self.diagnostics:
            key = diagnostic.kind.value
            kinds[key] = kinds.get(key, 0) + 1

        return {
            "workbook": self.workbook,
            "total_answers": len(self.answers),
            "answered": sum(1 for a in self.answers if a.value is not None),
            "list_table_rows": len(self.list_rows),
            "by_strategy": dict(sorted(strategies.items())),
            "diagnostics": dict(sorted(kinds.items())),
            "misses": len(self.misses),
        }


class FileFailure(BaseModel):
    """A workbook that could not be read at all."""

    workbook: str
    error: str


class BatchResult(BaseModel):
    """Merged output of a batch run, in input order."""

    results: list[ExtractionResult] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)

    @property
    def answers(self) -> list[ParsedAnswer]:
        return [a for r in self.results for a in r.answers]

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for r in self.results for d in r.diagnostics]

    def get_statistics(self) -> dict:
        return {
            "workbooks": len(self.results) + len(self.failures),
            "succeeded": len(self.results),
            "failed": len(self.failures),
            "answers": len(self.answers),
            "misses": sum(len(r.misses) for r in self.results),
        }
