"""Tests for tab layouts and the layout registry."""

import json

import pytest
from pydantic import ValidationError

from sheetharvest.layouts import (
    DEFAULT_LAYOUTS,
    SKIP,
    LayoutConfigError,
    ListTableRegion,
    TabLayout,
    TabLayoutRegistry,
)


def _layout(**overrides) -> TabLayout:
    fields = dict(
        tab_name="Test",
        question_column="B",
        question_text_start_row=4,
        answer_column="G",
        answer_start_row=4,
    )
    fields.update(overrides)
    return TabLayout(**fields)


class TestListTableRegion:
    """Test list-table region validation and range checks."""

    def test_columns_upper_cased(self):
        """Test data columns are normalized."""
        region = ListTableRegion(start_row=6, end_row=17, data_columns=("e", "f"))
        assert region.data_columns == ("E", "F")

    def test_requires_columns(self):
        """Test an empty column list is rejected."""
        with pytest.raises(ValidationError):
            ListTableRegion(start_row=6, data_columns=())

    def test_invalid_column(self):
        """Test column letters are validated."""
        with pytest.raises(ValidationError):
            ListTableRegion(start_row=6, data_columns=("E1",))

    def test_end_before_start(self):
        """Test an inverted range is rejected."""
        with pytest.raises(ValidationError):
            ListTableRegion(start_row=10, end_row=5, data_columns=("A",))

    def test_labels_must_match_columns(self):
        """Test label count must equal column count."""
        with pytest.raises(ValidationError):
            ListTableRegion(start_row=6, data_columns=("E", "F"), column_labels=("Name",))

    def test_labels_fall_back_to_letters(self):
        """Test unlabeled regions use column letters."""
        assert ListTableRegion(start_row=6, data_columns=("E", "F")).labels() == ["E", "F"]

    def test_until_blank_is_open_ended(self):
        """Test an until-blank region contains every later row."""
        region = ListTableRegion(start_row=20, data_columns=("D",))
        assert region.until_blank
        assert region.contains(20)
        assert region.contains(5000)
        assert not region.contains(19)

    def test_overlaps(self):
        """Test range overlap detection, open-ended ranges included."""
        a = ListTableRegion(start_row=6, end_row=10, data_columns=("A",))
        b = ListTableRegion(start_row=11, end_row=15, data_columns=("A",))
        c = ListTableRegion(start_row=10, end_row=12, data_columns=("A",))
        d = ListTableRegion(start_row=14, data_columns=("A",))
        assert not a.overlaps(b)
        assert a.overlaps(c)
        assert b.overlaps(d)
        assert not a.overlaps(d)


class TestTabLayout:
    """Test row exclusivity rules and row classification."""

    def test_skip_and_header_overlap_rejected(self):
        """Test a row cannot be both skip and section header."""
        with pytest.raises(ValidationError, match="both skip and section header"):
            _layout(skip_rows=(1, 2), section_header_rows=(2,))

    def test_skip_row_inside_list_table_rejected(self):
        """Test skip rows must lie outside list tables."""
        with pytest.raises(ValidationError, match="inside list table"):
            _layout(
                skip_rows=(12,),
                list_tables=(ListTableRegion(start_row=10, end_row=15, data_columns=("D",)),),
            )

    def test_header_after_until_blank_table_rejected(self):
        """Test an until-blank table claims every row after its start."""
        with pytest.raises(ValidationError, match="inside list table"):
            _layout(
                section_header_rows=(40,),
                list_tables=(ListTableRegion(start_row=20, data_columns=("D",)),),
            )

    def test_overlapping_list_tables_rejected(self):
        """Test two list tables may not share rows."""
        with pytest.raises(ValidationError, match="overlap"):
            _layout(
                list_tables=(
                    ListTableRegion(start_row=6, end_row=12, data_columns=("D",)),
                    ListTableRegion(start_row=12, end_row=14, data_columns=("E",)),
                )
            )

    def test_empty_explicit_mapping_rejected(self):
        """Test explicit mappings need a target."""
        with pytest.raises(ValidationError):
            _layout(explicit_mappings={5: " "})

    def test_excluded_reason(self):
        """Test each exclusion kind is reported."""
        layout = _layout(
            skip_rows=(1, 2),
            section_header_rows=(10,),
            list_tables=(ListTableRegion(start_row=20, end_row=25, data_columns=("D",)),),
        )
        assert layout.excluded_reason(2) == "skip"
        assert layout.excluded_reason(10) == "section_header"
        assert layout.excluded_reason(22) == "list_table"
        assert layout.excluded_reason(11) is None

    def test_is_question_row(self):
        """Test rows before answer_start_row or excluded are not scanned."""
        layout = _layout(answer_start_row=5, section_header_rows=(7,))
        assert not layout.is_question_row(4)
        assert layout.is_question_row(5)
        assert not layout.is_question_row(7)

    def test_explicit_target(self):
        """Test explicit targets are trimmed."""
        layout = _layout(explicit_mappings={4: " 3.1 ", 31: SKIP})
        assert layout.explicit_target(4) == "3.1"
        assert layout.explicit_target(31) == SKIP
        assert layout.explicit_target(5) is None

    def test_column_indices(self):
        """Test column letters expose 0-based indices."""
        layout = _layout(comment_column="h")
        assert layout.question_index == 1
        assert layout.answer_index == 6
        assert layout.comment_index == 7
        assert _layout().comment_index is None


class TestTabLayoutRegistry:
    """Test the layout registry."""

    def test_defaults_cover_hq_tabs(self):
        """Test the shipped layouts describe the six questionnaire tabs."""
        registry = TabLayoutRegistry.default()
        assert len(registry) == 6
        assert registry.tab_names == [
            "Supplier Product Contact",
            "Food Contact",
            "Ecolabels",
            "Biocides",
            "PIDSL",
            "Additional Requirements",
        ]

    def test_defaults_are_valid(self):
        """Test every default layout passes validation when rebuilt."""
        for layout in DEFAULT_LAYOUTS:
            assert TabLayout.model_validate(layout.model_dump()) == layout

    def test_biocides_defaults(self):
        """Test the curated Biocides rows."""
        biocides = TabLayoutRegistry.default().get("Biocides")
        assert biocides.explicit_target(4) == "3.1"
        assert biocides.explicit_target(31) == SKIP
        assert biocides.list_tables[0].associated_question_id == "3.2"
        assert biocides.excluded_reason(10) == "list_table"

    def test_food_contact_list_table(self):
        """Test the Food Contact list table columns."""
        region = TabLayoutRegistry.default().get("Food Contact").list_tables[0]
        assert region.start_row == 20
        assert region.data_columns == ("D", "E", "F", "G", "I", "J", "K")

    def test_case_insensitive_lookup(self):
        """Test tab names are looked up ignoring case and padding."""
        registry = TabLayoutRegistry.default()
        assert registry.get("food contact").tab_name == "Food Contact"
        assert " PIDSL " in registry
        assert registry.get("Unknown") is None

    def test_duplicate_tab_names_rejected(self):
        """Test two layouts for one tab are rejected."""
        with pytest.raises(LayoutConfigError):
            TabLayoutRegistry([_layout(tab_name="Food Contact"), _layout(tab_name="FOOD CONTACT")])

    def test_from_json(self, tmp_path):
        """Test loading layouts from JSON with string row keys."""
        path = tmp_path / "layouts.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "tab_name": "New Tab",
                        "question_column": "A",
                        "question_text_start_row": 3,
                        "answer_column": "C",
                        "answer_start_row": 3,
                        "skip_rows": [1],
                        "section_header_rows": [2],
                        "explicit_mappings": {"5": "1.1", "6": "SKIP"},
                        "list_tables": [{"start_row": 10, "data_columns": ["D", "E"]}],
                    }
                ]
            ),
            encoding="utf-8",
        )

        registry = TabLayoutRegistry.from_json(path)
        layout = registry.get("new tab")
        assert layout.explicit_target(5) == "1.1"
        assert layout.list_tables[0].until_blank

    def test_from_json_invalid_layout(self, tmp_path):
        """Test an invalid layout in JSON raises LayoutConfigError."""
        path = tmp_path / "layouts.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "tab_name": "Bad",
                        "question_column": "A",
                        "question_text_start_row": 1,
                        "answer_column": "B",
                        "answer_start_row": 1,
                        "skip_rows": [3],
                        "section_header_rows": [3],
                    }
                ]
            ),
            encoding="utf-8",
        )
        with pytest.raises(LayoutConfigError):
            TabLayoutRegistry.from_json(path)

    def test_from_json_not_a_list(self, tmp_path):
        """Test a non-list document raises LayoutConfigError."""
        path = tmp_path / "layouts.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(LayoutConfigError):
            TabLayoutRegistry.from_json(path)
