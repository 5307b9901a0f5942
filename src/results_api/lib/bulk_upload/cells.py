"""Cell-level helpers shared by the validators and transformers.

Raw rows carry text only.  Spreadsheet exports may render integral numbers
as ``"5.0"`` and CSVs may carry stray whitespace, so every numeric read
goes through these helpers instead of bare ``int()``/``float()``.
"""

import math

from results_api.lib.bulk_upload.types import MAX_PARTICIPANT_SLOTS, RawRow


def cell(row: RawRow, name: str) -> str:
    """Return the trimmed text of a column, or ``""`` if absent."""
    value = row.get(name)
    if value is None:
        return ""
    return str(value).strip()


def is_blank(row: RawRow, name: str) -> bool:
    """True when the column is missing or holds only whitespace."""
    return cell(row, name) == ""


def to_float(text: str) -> float | None:
    """Parse a finite float, returning None for blank or non-numeric text."""
    text = text.strip().replace(",", "")
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def to_int(text: str, default: int | None = None) -> int | None:
    """Parse an integer, truncating fractional parts (``"12.0"`` -> 12).

    Returns ``default`` for blank or non-numeric text.
    """
    number = to_float(text)
    if number is None:
        return default
    return int(number)


def participant_slots() -> range:
    """Slot numbers scanned for indexed participant columns."""
    return range(1, MAX_PARTICIPANT_SLOTS + 1)
