"""A1 cell addressing helpers."""

import re

_ADDRESS_PATTERN = re.compile(r"^\$?([A-Za-z]{1,3})\$?(\d+)$")
_COLUMN_PATTERN = re.compile(r"^[A-Za-z]+$")


def column_to_index(col: str) -> int:
    """Convert column letter(s) to 0-based index. A=0, B=1, ..., Z=25, AA=26, etc."""
    if not col or not _COLUMN_PATTERN.match(col):
        raise ValueError(f"Invalid column letters: {col!r}")
    result = 0
    for char in col.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_column(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def parse_address(address: str) -> tuple[str, int]:
    """Parse A1 notation (absolute markers allowed) into column letters and row number."""
    match = _ADDRESS_PATTERN.match(address.strip())
    if not match:
        raise ValueError(f"Invalid cell notation: {address}")
    row = int(match.group(2))
    if row < 1:
        raise ValueError(f"Invalid cell notation: {address}")
    return match.group(1).upper(), row


def normalize_address(address: str) -> str:
    """Return the address without `$` markers, upper-cased (e.g. "$g$9" -> "G9")."""
    col, row = parse_address(address)
    return f"{col}{row}"
