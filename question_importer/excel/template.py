from __future__ import annotations

import io
from pathlib import Path

import pandas as pd

from ..models.column_mapping import DEFAULT_COLUMN_MAPPING

"""Sample question workbook using the default column layout.

Users download this template, fill it in and upload it back, so its headers
must stay in line with DEFAULT_COLUMN_MAPPING.
"""

__all__ = [
    "TEMPLATE_ROWS",
    "TEMPLATE_SHEET_NAME",
    "build_template_bytes",
    "write_template",
]

TEMPLATE_SHEET_NAME = "Template"

TEMPLATE_ROWS: list[dict[str, str]] = [
    {
        "Question": "Do you have a quality management system?",
        "Type": "yesNo",
        "Required": "yes",
        "Options": "",
        "Tags": "Quality, Management",
        "Section": "Quality Management",
    },
    {
        "Question": "How many employees work in your quality department?",
        "Type": "multipleChoice",
        "Required": "yes",
        "Options": "1-5, 6-10, 11-20, 21+",
        "Tags": "Quality, Staffing",
        "Section": "Quality Management",
    },
    {
        "Question": "Please describe your quality control process",
        "Type": "text",
        "Required": "yes",
        "Options": "",
        "Tags": "Quality, Process",
        "Section": "Quality Management",
    },
]

# Excel character widths per column
COLUMN_WIDTHS = {
    "Question": 50,
    "Type": 15,
    "Required": 10,
    "Options": 30,
    "Tags": 30,
    "Section": 20,
}


def _template_frame() -> pd.DataFrame:
    headers = [h for h in DEFAULT_COLUMN_MAPPING.to_dict().values() if h is not None]
    return pd.DataFrame(TEMPLATE_ROWS, columns=headers)


def _write(target: Path | io.BytesIO) -> None:
    df = _template_frame()
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=TEMPLATE_SHEET_NAME, index=False)
        sheet = writer.sheets[TEMPLATE_SHEET_NAME]
        for idx, header in enumerate(df.columns):
            letter = sheet.cell(row=1, column=idx + 1).column_letter
            sheet.column_dimensions[letter].width = COLUMN_WIDTHS.get(header, 20)


def build_template_bytes() -> bytes:
    """Return the template workbook as .xlsx bytes."""
    buffer = io.BytesIO()
    _write(buffer)
    return buffer.getvalue()


def write_template(path: Path) -> Path:
    """Write the template workbook to ``path`` (parents created)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _write(path)
    return path
