"""Parser for single-hop sheet!cell reference formulas."""

import logging
import re
from typing import Optional

from ..workbook.cells import normalize_address
from ..workbook.models import CellReference
from .models import ParseOutcome, UnparseableFormula

logger = logging.getLogger(__name__)

# Optional external workbook marker ([2], [Book.xlsx]) ahead of an unquoted name
_EXTERNAL_MARKER = r"(?:\[[^\]]*\])?"

REFERENCE_PATTERN = re.compile(
    r"""^\s*=?\s*
    (?:
        '(?P<quoted>(?:[^']|'')+)'
      | (?P<bare>""" + _EXTERNAL_MARKER + r"""[^'!\[\]\s()=,;&+\-*/<>"^]+)
    )
    !
    (?P<address>\$?[A-Za-z]{1,3}\$?[0-9]+)
    \s*$""",
    re.VERBOSE,
)


def _strip_external_marker(name: str) -> str:
    # Excel sheet names cannot contain brackets, so anything up to the last ']' is the marker
    if "]" in name:
        name = name.rsplit("]", 1)[1]
    return name


class ReferenceParser:
    """Turn answer-cell formulas into typed cell references."""

    def parse(self, formula: Optional[str]) -> ParseOutcome:
        """
        Parse a formula that is exactly one sheet!cell reference.

        Accepted forms include `='Food Contact'!G9`, `=[2]Ecolabels!$F$5` and
        `='[2]Supplier Product Contact'!C20`. The external marker is ignored.

        Returns:
            CellReference on success, otherwise UnparseableFormula with a reason
        """
        if formula is None or not str(formula).strip():
            return UnparseableFormula(formula="", reason="empty formula")

        text = str(formula)
        match = REFERENCE_PATTERN.match(text)
        if not match:
            return UnparseableFormula(formula=text, reason="not a single sheet!cell reference")

        if match.group("quoted") is not None:
            name = match.group("quoted").replace("''", "'")
        else:
            name = match.group("bare")
        name = _strip_external_marker(name).strip()
        if not name:
            return UnparseableFormula(formula=text, reason="missing sheet name")

        try:
            address = normalize_address(match.group("address"))
        except ValueError as e:
            return UnparseableFormula(formula=text, reason=str(e))

        return CellReference(sheet_name=name, cell_address=address)


def parse_reference(formula: Optional[str]) -> ParseOutcome:
    """Module-level shortcut for ReferenceParser().parse."""
    return ReferenceParser().parse(formula)
