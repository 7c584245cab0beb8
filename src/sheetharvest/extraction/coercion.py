"""Coerce raw answer text to the type a question's response type asks for."""

import datetime
from typing import Optional, Union

from .models import ValueKind

TypedValue = Union[bool, int, float, str, None]

TRUE_VALUES = {"yes", "y", "true", "1", "x"}
FALSE_VALUES = {"no", "n", "false", "0"}
DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y", "%Y/%m/%d")
CHOICE_TYPES = ("choice", "dropdown", "select", "radio")


def _to_number(text: str) -> Optional[Union[int, float]]:
    cleaned = text.replace(" ", "")
    if cleaned.count(",") == 1 and "." not in cleaned:
        cleaned = cleaned.replace(",", ".")  # decimal comma, e.g. "0,5"
    else:
        cleaned = cleaned.replace(",", "")
    try:
        number = float(cleaned)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def _to_bool(text: str) -> Optional[bool]:
    folded = text.strip().casefold()
    if folded in TRUE_VALUES:
        return True
    if folded in FALSE_VALUES:
        return False
    return None


def _to_date(text: str) -> Optional[str]:
    candidate = text.strip()
    # Cells holding datetimes are rendered as ISO text with an optional time part
    if len(candidate) > 10 and candidate[10] == "T":
        candidate = candidate[:10]
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(candidate, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def coerce_value(raw: Optional[str], response_type: Optional[str]) -> tuple[ValueKind, TypedValue]:
    """
    Coerce a raw answer for a question's response type.

    Values that do not parse as the requested type fall back to text.

    Returns:
        (value_kind, typed_value)
    """
    if raw is None or not raw.strip():
        return ValueKind.EMPTY, None

    text = raw.strip()
    kind = (response_type or "text").strip().lower()

    if kind in ("number", "numeric", "integer", "decimal", "percentage"):
        number = _to_number(text)
        if number is not None:
            return ValueKind.NUMBER, number
    elif kind in ("boolean", "bool", "yes_no", "yesno", "checkbox"):
        flag = _to_bool(text)
        if flag is not None:
            return ValueKind.BOOLEAN, flag
    elif kind in ("date", "datetime"):
        parsed = _to_date(text)
        if parsed is not None:
            return ValueKind.DATE, parsed
    elif any(choice in kind for choice in CHOICE_TYPES):
        return ValueKind.CHOICE, text

    return ValueKind.TEXT, text
