from __future__ import annotations

from dataclasses import dataclass

"""RawRow model for the question importer.

A RawRow is one data row of the first sheet after the workbook reader has
applied the header row. Fully blank rows never become a RawRow, so
``row_number`` counts the non-blank data rows (1 = first data row).
"""

__all__ = [
    "CellValue",
    "RawRow",
    "cell_text",
]

CellValue = str | int | float | bool | None


@dataclass(frozen=True)
class RawRow:
    """Header -> raw cell value, in sheet column order.

    Cell values are text, numbers, booleans (native spreadsheet TRUE/FALSE)
    or None for empty cells. CSV cells are always text.
    """
    row_number: int
    values: dict[str, CellValue]


def cell_text(value: CellValue) -> str | None:
    """Stripped text of a cell, or None when the cell counts as blank.

    A native FALSE and a numeric zero count as blank, the same as an empty
    cell. The text "0" or "FALSE" is not blank.
    """
    if value is None or value is False:
        return None
    if not isinstance(value, (bool, str)) and value == 0:
        return None
    text = str(value).strip()
    return text or None
