from __future__ import annotations

import re
from collections.abc import Mapping

from ..models.question import QuestionType
from ..models.row_data import CellValue, cell_text
from .columns import find_column

"""Field classifiers: raw cell -> normalized question field.

Every classifier takes the row values and the mapped header for its field
(None when the mapping leaves the field out) and never fails: an unmapped
column, a header missing from the row, an empty cell, blank text, a
native FALSE or a numeric zero all produce the field default.
"""

__all__ = [
    "classify_type",
    "classify_required",
    "extract_options",
    "extract_tag_names",
    "extract_section_name",
    "split_list",
]

LIST_SEPARATORS = re.compile(r"[,;|]")
NOT_REQUIRED_VALUES = frozenset({"no", "false", "0", "n"})


def _cell_text(row: Mapping[str, CellValue], column_name: str | None) -> str | None:
    """Resolved cell as text, or None when absent or blank."""
    header = find_column(row, column_name)
    if header is None:
        return None
    return cell_text(row.get(header))


def split_list(text: str | None) -> list[str]:
    """Split on comma, semicolon or pipe; trim pieces; drop empty pieces."""
    if not text:
        return []
    return [piece.strip() for piece in LIST_SEPARATORS.split(text) if piece.strip()]


def classify_type(row: Mapping[str, CellValue], column_name: str | None) -> QuestionType:
    text = _cell_text(row, column_name)
    if text is None:
        return QuestionType.TEXT
    value = text.lower()
    # order matters: "multiple choice (yes/no)" is a yes/no question
    if "yes" in value or "no" in value or value == "yn":
        return QuestionType.YES_NO
    if "multi" in value or "choice" in value:
        return QuestionType.MULTIPLE_CHOICE
    if "scale" in value:
        return QuestionType.SCALE
    return QuestionType.TEXT


def classify_required(row: Mapping[str, CellValue], column_name: str | None) -> bool:
    text = _cell_text(row, column_name)
    if text is None:
        return True
    return text.lower() not in NOT_REQUIRED_VALUES


def extract_options(row: Mapping[str, CellValue], column_name: str | None) -> list[str]:
    return split_list(_cell_text(row, column_name))


def extract_tag_names(row: Mapping[str, CellValue], column_name: str | None) -> list[str]:
    """Tag *names* as typed; resolution to ids happens in ReferenceResolver."""
    return split_list(_cell_text(row, column_name))


def extract_section_name(row: Mapping[str, CellValue], column_name: str | None) -> str | None:
    return _cell_text(row, column_name)
