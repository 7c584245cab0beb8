"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any, Callable

import openpyxl
import pytest

from sheetharvest.catalog import CanonicalQuestion, QuestionIndex
from sheetharvest.extraction import ExtractionContext
from sheetharvest.formulas import FormulaMapping, FormulaMapSet
from sheetharvest.layouts import TabLayoutRegistry
from sheetharvest.workbook import CellReference, WorkbookSnapshot

TabCells = dict[str, dict[str, Any]]


def _openpyxl_workbook(tabs: TabCells) -> openpyxl.Workbook:
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for title, cells in tabs.items():
        sheet = workbook.create_sheet(title)
        for address, value in cells.items():
            sheet[address] = value
    return workbook


@pytest.fixture
def build_workbook() -> Callable[..., WorkbookSnapshot]:
    """Build an in-memory workbook snapshot from {tab: {address: value}}."""

    def _build(tabs: TabCells, name: str = "supplier.xlsx") -> WorkbookSnapshot:
        return WorkbookSnapshot.from_openpyxl(_openpyxl_workbook(tabs), name=name)

    return _build


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Save a workbook built from {tab: {address: value}} under tmp_path."""

    def _write(filename: str, tabs: TabCells) -> Path:
        path = tmp_path / filename
        _openpyxl_workbook(tabs).save(path)
        return path

    return _write


@pytest.fixture
def questions() -> list[CanonicalQuestion]:
    """A small HQ 2.1 style catalog, in catalog order."""
    return [
        CanonicalQuestion(id="1.1", content="Company Name", section_number=1, subsection_number=1),
        CanonicalQuestion(
            id="1.2", content="Trade name of the product", section_number=1, subsection_number=2
        ),
        CanonicalQuestion(
            id="2.1",
            content="Is the product intended for food contact materials?",
            response_type="boolean",
            section_number=2,
            subsection_number=1,
        ),
        CanonicalQuestion(
            id="2.2",
            content="Does the product comply with Regulation (EU) No 10/2011?",
            response_type="boolean",
            section_number=2,
            subsection_number=2,
        ),
        CanonicalQuestion(
            id="3.1",
            content="Does the product contain biocides?",
            response_type="boolean",
            section_number=3,
            subsection_number=1,
        ),
        CanonicalQuestion(
            id="3.2",
            content="If yes, please specify the substance, CAS number and concentration",
            response_type="list_table",
            section_number=3,
            subsection_number=2,
        ),
        CanonicalQuestion(
            id="3.3",
            content="Is the biocide used as in-can preservative (PT 6)?",
            response_type="boolean",
            section_number=3,
            subsection_number=3,
        ),
        CanonicalQuestion(
            id="3.8",
            content="Is the biocide registered for slimicide use (PT 12)?",
            response_type="boolean",
            section_number=3,
            subsection_number=8,
        ),
        CanonicalQuestion(
            id="4.1",
            content="Does the product hold the EU Ecolabel certification?",
            response_type="dropdown",
            section_number=4,
            subsection_number=1,
        ),
        CanonicalQuestion(
            id="4.2",
            content="Please provide the Nordic Swan licence number",
            section_number=4,
            subsection_number=2,
            tags=("HQ2.1",),
        ),
    ]


@pytest.fixture
def question_index(questions) -> QuestionIndex:
    return QuestionIndex(questions, fuzzy_threshold=0.7, fuzzy_window=100, max_length_delta=50, min_length=5)


@pytest.fixture
def supplier_tabs() -> TabCells:
    """A filled HQ 2.1 workbook; PIDSL and Additional Requirements are absent."""
    return {
        "Supplier Product Contact": {
            "B1": "Please fill in all yellow cells",
            "B7": "General Supplier",
            "B10": "Company Name",
            "C10": "Acme Chemicals",
            "B11": "Trade name",
            "C11": "Acme Fresh 200",
        },
        "Food Contact": {
            "B1": "Food Contact",
            "B5": "Is the product intended for food contact materials?",
            "G5": "Yes",
            "H5": "paper and board",
            "B9": "Does the product comply with Regulation (EU) 10/2011?",
            "G9": "Yes",
            "H9": "migration tested",
            # section header that happens to read like a catalog question
            "B10": "Trade name of the product",
            "G10": "X",
            "B12": "Does the product hold the EU Ecolabel certification?",
            "G12": "n/a",
            "B20": "Is the product intended for food contact materials?",
            "D20": "50-00-0",
            "E20": "FCM 98",
            "G20": "Formaldehyde",
            "I20": "0.1 %",
            "D21": "7732-18-5",
            "G21": "Water",
            "D23": "read past the blank row",
        },
        "Ecolabels": {
            "A4": "Ecolabel",
            "F4": "Answer",
            "A5": "Does the product hold the EU Ecolabel certification?",
            "F5": "No",
            "G5": "pending",
            "C7": "LIC-123",
        },
        "Biocides": {
            "A2": "Biocides",
            "A4": "Does the product contain biocides?",
            "D4": "Yes",
            "E4": "see SDS",
            "A6": "Does the product contain biocides?",
            "D6": "Yes",
            "E6": "Bronopol",
            "F6": "52-51-7",
            "G6": "200-143-0",
            "H6": "0.05%",
            "E7": "CMIT/MIT",
            "F7": "55965-84-9",
            "E10": "Glutaral",
            "A19": "Used as in-can preservative (PT 6)?",
            "D19": "No",
            "A31": "Used as slimicide for paper (PT 12)?",
            "D31": "No",
            "A34": "Registered for slimicide use (PT 12)?",
            "D34": "Yes",
            "A37": "Something odd about product type 11",
            "D37": "Yes",
        },
    }


@pytest.fixture
def formula_map() -> FormulaMapSet:
    return FormulaMapSet(
        template_version="HQ 2.1",
        source_sheet="STACKS TAB 2023",
        mappings=(
            FormulaMapping(
                question_id="2.2",
                primary_cell=CellReference(sheet_name="Food Contact", cell_address="G9"),
                secondary_cells=(
                    CellReference(sheet_name="Food Contact", cell_address="H9"),
                    CellReference(sheet_name="Missing Tab", cell_address="A1"),
                ),
                template_row=2,
            ),
            FormulaMapping(
                question_id="4.2",
                primary_cell=CellReference(sheet_name="Ecolabels", cell_address="C7"),
                template_row=3,
            ),
            FormulaMapping(
                question_id="3.3",
                primary_cell=CellReference(sheet_name="Biocides", cell_address="D50"),
                template_row=4,
            ),
            FormulaMapping(
                question_id="9.9",
                primary_cell=CellReference(sheet_name="PIDSL", cell_address="G5"),
                template_row=5,
            ),
        ),
    )


@pytest.fixture
def context(question_index, formula_map) -> ExtractionContext:
    return ExtractionContext(
        index=question_index,
        layouts=TabLayoutRegistry.default(),
        formula_map=formula_map,
        blank_values=frozenset({"0", "n/a"}),
    )


@pytest.fixture
def layout_only_context(question_index) -> ExtractionContext:
    return ExtractionContext(
        index=question_index,
        layouts=TabLayoutRegistry.default(),
        blank_values=frozenset({"0", "n/a"}),
    )
