"""Configuration management for SheetHarvest."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_blank_values() -> list[str]:
    """Parse answer placeholders that count as "no answer" from the environment."""
    raw = os.getenv("BLANK_ANSWER_VALUES")
    if raw:
        values = [v.strip().lower() for v in raw.split(",") if v.strip()]
        if values:
            return values
    return ["0", "n/a"]


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


class Settings(BaseModel):
    """Application settings."""

    # Question matching
    fuzzy_threshold: float = float(os.getenv("FUZZY_THRESHOLD", "0.7"))  # similarity must be strictly above
    fuzzy_window: int = int(os.getenv("FUZZY_WINDOW", "100"))  # characters compared by edit distance
    fuzzy_max_length_delta: int = int(os.getenv("FUZZY_MAX_LENGTH_DELTA", "50"))
    min_match_length: int = int(os.getenv("MIN_MATCH_LENGTH", "5"))

    # Cell values treated as unanswered on the layout path and in list tables
    blank_answer_values: list[str] = _parse_blank_values()

    # Reference template layout
    template_index_sheet: str = os.getenv("TEMPLATE_INDEX_SHEET", "STACKS TAB 2023")
    template_index_column: str = os.getenv("TEMPLATE_INDEX_COLUMN", "A")
    template_label_column: str = os.getenv("TEMPLATE_LABEL_COLUMN", "E")
    template_first_row: int = int(os.getenv("TEMPLATE_FIRST_ROW", "2"))
    template_answer_column: str = os.getenv("TEMPLATE_ANSWER_COLUMN", "H")
    template_secondary_columns: int = int(os.getenv("TEMPLATE_SECONDARY_COLUMNS", "9"))  # I..Q

    # Input locations
    catalog_path: Path = Path(os.getenv("CATALOG_PATH", "data/question-catalog.json"))
    formula_map_path: Path = Path(os.getenv("FORMULA_MAP_PATH", "data/formula-map.json"))
    layouts_path: Optional[Path] = _optional_path("LAYOUTS_PATH")  # None means built-in layouts

    # Batch processing
    batch_workers: int = int(os.getenv("BATCH_WORKERS", "1"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
