"""Data models for the canonical question catalog."""

import re
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator

from ..exceptions import SheetHarvestError

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """
    Lowercase, turn punctuation into spaces, collapse whitespace, trim.

    Word characters are Unicode-aware, so accented letters such as the "ä" in
    "Säkerhet" are kept rather than replaced by a space.
    """
    if not text:
        return ""
    lowered = _NON_WORD.sub(" ", str(text).lower())
    return _WHITESPACE.sub(" ", lowered).strip()


class MatchStrategy(str, Enum):
    """How an answer was tied to a catalog question."""

    EXACT = "exact"
    CONTAINS = "contains"
    FUZZY = "fuzzy"
    EXPLICIT = "explicit"  # curated row mapping in a tab layout
    FORMULA = "formula"  # dereferenced through the reference template
    NONE = "none"


class CanonicalQuestion(BaseModel):
    """One row of the master question catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    content: str = ""
    name: str = ""  # short name, used for matching when content is blank
    response_type: str = Field(
        default="text", validation_alias=AliasChoices("response_type", "responseType")
    )
    section_number: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("section_number", "sectionNumber")
    )
    subsection_number: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("subsection_number", "subsectionNumber")
    )
    order_number: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("order_number", "orderNumber")
    )
    tags: tuple[str, ...] = ()

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> str:
        return str(value)

    @field_validator("content", "name", "response_type", mode="before")
    @classmethod
    def _none_as_default(cls, value: Any, info) -> Any:
        if value is None:
            return "text" if info.field_name == "response_type" else ""
        return value

    @computed_field
    @property
    def full_number(self) -> str:
        """Dotted position, e.g. "4.8.1"; missing levels are left out."""
        parts = [self.section_number, self.subsection_number, self.order_number]
        return ".".join(str(p) for p in parts if p is not None)

    @computed_field
    @property
    def normalized_text(self) -> str:
        return normalize_text(self.content or self.name)


class CatalogLoadError(SheetHarvestError):
    """Raised when the question catalog cannot be loaded."""

    pass
