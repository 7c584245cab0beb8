"""Data models for per-tab layout descriptions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import SheetHarvestError
from ..workbook.cells import column_to_index

# Explicit mapping target marking an intentional non-match (e.g. a known catalog gap)
SKIP = "SKIP"


def _check_column(value: str) -> str:
    column_to_index(value)
    return value.upper()


class ListTableRegion(BaseModel):
    """A block of repeating rows (one row per substance, etc.) inside a tab."""

    model_config = ConfigDict(frozen=True)

    associated_question_id: Optional[str] = None  # full number, e.g. "3.2"
    start_row: int = Field(ge=1)
    end_row: Optional[int] = None  # None reads until the first blank row
    data_columns: tuple[str, ...]
    column_labels: tuple[str, ...] = ()

    @field_validator("data_columns")
    @classmethod
    def _validate_columns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("a list table needs at least one data column")
        return tuple(_check_column(c) for c in value)

    @model_validator(mode="after")
    def _validate_shape(self) -> "ListTableRegion":
        if self.end_row is not None and self.end_row < self.start_row:
            raise ValueError(f"end_row {self.end_row} is before start_row {self.start_row}")
        if self.column_labels and len(self.column_labels) != len(self.data_columns):
            raise ValueError("column_labels must match data_columns one to one")
        return self

    @property
    def until_blank(self) -> bool:
        return self.end_row is None

    def contains(self, row: int) -> bool:
        return row >= self.start_row and (self.end_row is None or row <= self.end_row)

    def overlaps(self, other: "ListTableRegion") -> bool:
        if self.end_row is not None and self.end_row < other.start_row:
            return False
        if other.end_row is not None and other.end_row < self.start_row:
            return False
        return True

    def labels(self) -> list[str]:
        """Column labels, falling back to the column letters."""
        return list(self.column_labels) if self.column_labels else list(self.data_columns)

    def describe(self) -> str:
        end = "blank" if self.end_row is None else str(self.end_row)
        return f"rows {self.start_row}-{end} [{','.join(self.data_columns)}]"


class TabLayout(BaseModel):
    """
    Where questions, answers and list tables sit within one tab.

    Row numbers are 1-based, as shown in spreadsheet software. Skip rows,
    section header rows and list-table ranges never overlap, and none of them
    is scanned for questions.
    """

    model_config = ConfigDict(frozen=True)

    tab_name: str
    question_column: str
    question_text_start_row: int = Field(ge=1)
    answer_column: str
    answer_start_row: int = Field(ge=1)
    comment_column: Optional[str] = None
    list_tables: tuple[ListTableRegion, ...] = ()
    skip_rows: tuple[int, ...] = ()
    section_header_rows: tuple[int, ...] = ()
    explicit_mappings: dict[int, str] = Field(default_factory=dict)  # row -> full number or SKIP

    @field_validator("question_column", "answer_column")
    @classmethod
    def _validate_column(cls, value: str) -> str:
        return _check_column(value)

    @field_validator("comment_column")
    @classmethod
    def _validate_optional_column(cls, value: Optional[str]) -> Optional[str]:
        return _check_column(value) if value else None

    @model_validator(mode="after")
    def _validate_exclusive_rows(self) -> "TabLayout":
        skip = set(self.skip_rows)
        headers = set(self.section_header_rows)

        both = skip & headers
        if both:
            raise ValueError(f"{self.tab_name}: rows {sorted(both)} are both skip and section header rows")

        for i, region in enumerate(self.list_tables):
            for kind, rows in (("skip", skip), ("section header", headers)):
                inside = sorted(r for r in rows if region.contains(r))
                if inside:
                    raise ValueError(
                        f"{self.tab_name}: {kind} rows {inside} fall inside list table {region.describe()}"
                    )
            for other in self.list_tables[i + 1:]:
                if region.overlaps(other):
                    raise ValueError(
                        f"{self.tab_name}: list tables {region.describe()} and {other.describe()} overlap"
                    )

        for row, target in self.explicit_mappings.items():
            if not target or not str(target).strip():
                raise ValueError(f"{self.tab_name}: explicit mapping for row {row} is empty")
        return self

    def excluded_reason(self, row: int) -> Optional[str]:
        """Why a row is not scanned for a question, or None if it is scannable."""
        if row in self.skip_rows:
            return "skip"
        if row in self.section_header_rows:
            return "section_header"
        if any(region.contains(row) for region in self.list_tables):
            return "list_table"
        return None

    def is_question_row(self, row: int) -> bool:
        return row >= self.answer_start_row and self.excluded_reason(row) is None

    def explicit_target(self, row: int) -> Optional[str]:
        target = self.explicit_mappings.get(row)
        return target.strip() if target else None

    @property
    def question_index(self) -> int:
        return column_to_index(self.question_column)

    @property
    def answer_index(self) -> int:
        return column_to_index(self.answer_column)

    @property
    def comment_index(self) -> Optional[int]:
        return column_to_index(self.comment_column) if self.comment_column else None


class LayoutConfigError(SheetHarvestError):
    """Raised when a layout registry cannot be built or loaded."""

    pass
