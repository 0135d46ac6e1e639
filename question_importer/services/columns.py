from __future__ import annotations

from collections.abc import Mapping
from typing import Any

"""Header resolution for spreadsheet rows.

Spreadsheets exported by suppliers rarely agree on header capitalisation, so
a mapped header is matched exactly first and then case-insensitively. There
is no fuzzy matching: a typo in a header is reported as a missing column.
"""

__all__ = [
    "find_column",
]


def find_column(row: Mapping[str, Any], column_name: str | None) -> str | None:
    """Return the header in ``row`` that matches ``column_name``.

    Args:
        row: Header -> value mapping in sheet column order
        column_name: Expected header; None means the field is unmapped

    Returns:
        The actual header key, or None if nothing matches. When several
        headers match case-insensitively the left-most one wins.
    """
    if column_name is None:
        return None
    if column_name in row:
        return column_name
    lowered = column_name.lower()
    for key in row:
        if key.lower() == lowered:
            return key
    return None
