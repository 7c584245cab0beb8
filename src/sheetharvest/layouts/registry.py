"""Registry of tab layouts, keyed case-insensitively by tab name."""

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from pydantic import ValidationError

from .models import SKIP, LayoutConfigError, ListTableRegion, TabLayout

logger = logging.getLogger(__name__)


# Layouts of the HQ 2.1 supplier questionnaire tabs
DEFAULT_LAYOUTS: tuple[TabLayout, ...] = (
    TabLayout(
        tab_name="Supplier Product Contact",
        question_column="B",  # labels like "Company Name", "Trade Name"
        question_text_start_row=10,
        answer_column="C",
        answer_start_row=10,
        skip_rows=(1, 2, 3, 4, 5, 6, 8),  # instructions and disclaimers
        section_header_rows=(7, 9, 18),  # "General Supplier", "Supplier", "Product"
    ),
    TabLayout(
        tab_name="Food Contact",
        question_column="B",
        question_text_start_row=4,
        answer_column="G",
        answer_start_row=4,
        comment_column="H",
        list_tables=(
            ListTableRegion(
                start_row=20,
                end_row=None,
                data_columns=("D", "E", "F", "G", "I", "J", "K"),
                column_labels=(
                    "CAS Number",
                    "FCM Number",
                    "SML (mg/kg)",
                    "Chemical Name",
                    "Conc. and Unit",
                    "Restrictions",
                    "Comments",
                ),
            ),
        ),
        skip_rows=(1, 2, 3),
        section_header_rows=(10, 14),
    ),
    TabLayout(
        tab_name="Ecolabels",
        question_column="A",
        question_text_start_row=4,
        answer_column="F",
        answer_start_row=5,  # row 4 holds the column headings
        comment_column="G",  # applicable limitations
        skip_rows=(1, 2),
        section_header_rows=(3, 15, 33, 39, 45),  # EU Ecolabel, Nordic Ecolabel, Blue Angel, ...
    ),
    TabLayout(
        tab_name="Biocides",
        question_column="A",
        question_text_start_row=4,
        answer_column="D",
        answer_start_row=4,
        comment_column="E",
        list_tables=(
            ListTableRegion(
                associated_question_id="3.2",  # "If yes, please specify the substance..."
                start_row=6,
                end_row=17,
                data_columns=("E", "F", "G", "H"),
                column_labels=("Chemical Name", "CAS Number", "EC Number", "Concentration"),
            ),
        ),
        skip_rows=(1, 3),
        section_header_rows=(2,),
        # Product types repeat the same three questions; rows pin them down.
        # PT 6: 3.3-3.5, PT 12: 3.6 and 3.8 (3.7 absent from the catalog), PT 11: 3.9-3.11
        explicit_mappings={
            4: "3.1",
            19: "3.3",
            22: "3.4",
            25: "3.5",
            28: "3.6",
            31: SKIP,
            34: "3.8",
            37: "3.9",
            40: "3.10",
            43: "3.11",
        },
    ),
    TabLayout(
        tab_name="PIDSL",
        question_column="B",
        question_text_start_row=5,
        answer_column="G",
        answer_start_row=5,
        comment_column="H",
        list_tables=(
            ListTableRegion(
                start_row=7,
                end_row=None,
                data_columns=("H", "I", "J", "K"),
                column_labels=("Chemical name", "CAS Number", "EC Number", "Concentration"),
            ),
        ),
        skip_rows=(1, 2, 4),
        section_header_rows=(3,),  # "General Section"
    ),
    TabLayout(
        tab_name="Additional Requirements",
        question_column="B",
        question_text_start_row=4,
        answer_column="F",
        answer_start_row=4,
        comment_column="G",
        skip_rows=(1, 2, 3),
    ),
)


class TabLayoutRegistry:
    """Read-only lookup of TabLayout by tab name (case-insensitive)."""

    def __init__(self, layouts: Iterable[TabLayout]):
        self._layouts: dict[str, TabLayout] = {}
        for layout in layouts:
            key = layout.tab_name.casefold()
            if key in self._layouts:
                raise LayoutConfigError(f"Duplicate layout for tab '{layout.tab_name}'")
            self._layouts[key] = layout

    @classmethod
    def default(cls) -> "TabLayoutRegistry":
        return cls(DEFAULT_LAYOUTS)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "TabLayoutRegistry":
        """
        Load layouts from a JSON file holding a list of TabLayout objects.

        Raises:
            LayoutConfigError: Unreadable file or invalid layout
        """
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise LayoutConfigError(f"Cannot read layouts from '{path}': {e}") from e

        if not isinstance(raw, list):
            raise LayoutConfigError(f"Layouts file '{path}' must contain a list")

        try:
            layouts = [TabLayout.model_validate(item) for item in raw]
        except ValidationError as e:
            raise LayoutConfigError(f"Invalid layout in '{path}': {e}") from e

        logger.info(f"Loaded {len(layouts)} tab layouts from {path}")
        return cls(layouts)

    def get(self, tab_name: str) -> Optional[TabLayout]:
        return self._layouts.get(tab_name.strip().casefold())

    def __contains__(self, tab_name: str) -> bool:
        return self.get(tab_name) is not None

    def __iter__(self) -> Iterator[TabLayout]:
        return iter(self._layouts.values())

    def __len__(self) -> int:
        return len(self._layouts)

    @property
    def tab_names(self) -> list[str]:
        return [layout.tab_name for layout in self._layouts.values()]
