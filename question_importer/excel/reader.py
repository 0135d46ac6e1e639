from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any

import pandas as pd

from ..models.row_data import CellValue, RawRow
from ..models.uploaded_file import UploadedFile

"""Workbook reader: uploaded bytes -> first sheet -> RawRows.

- .xlsx / .xls go through pandas.ExcelFile (openpyxl / xlrd engines)
- .csv goes through pandas.read_csv, decoded as utf-8-sig then latin-1;
  short rows are padded and long rows get "Unnamed: N" columns
- only the first sheet is read; the first row is the header row
- fully blank rows are dropped before row numbering
- pandas NA string detection is disabled, so cells such as "N/A" or "None"
  stay text

Every failure is raised as a WorkbookError subclass whose message is the
user-facing text.
"""

__all__ = [
    "SheetData",
    "WorkbookError",
    "WorkbookReadError",
    "NoSheetsError",
    "SheetParseError",
    "EmptySheetError",
    "read_first_sheet",
    "normalize_sheet",
]

logger = logging.getLogger(__name__)

CSV_ENCODINGS = ("utf-8-sig", "latin-1")
CSV_SHEET_NAME = "Sheet1"


class WorkbookError(Exception):
    """Base class for structural workbook failures."""


class WorkbookReadError(WorkbookError):
    def __init__(self) -> None:
        super().__init__("Unable to read file. Please ensure it is a valid Excel or CSV file")


class NoSheetsError(WorkbookError):
    def __init__(self) -> None:
        super().__init__("Excel file contains no sheets")


class SheetParseError(WorkbookError):
    def __init__(self) -> None:
        super().__init__("Unable to parse sheet data. Please check the file format")


class EmptySheetError(WorkbookError):
    def __init__(self) -> None:
        super().__init__("No data found in the file")


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RawRow]


def read_first_sheet(file: UploadedFile) -> SheetData:
    """Read the first sheet of ``file`` into header-keyed rows."""
    if file.extension == "csv":
        df = _read_csv(file.content)
        sheet_name = CSV_SHEET_NAME
    else:
        try:
            xls = pd.ExcelFile(io.BytesIO(file.content))
        except Exception as e:
            logger.debug("workbook open failed file=%s err=%s", file.name, e)
            raise WorkbookReadError() from e
        if not xls.sheet_names:
            raise NoSheetsError()
        sheet_name = str(xls.sheet_names[0])
        try:
            df = xls.parse(xls.sheet_names[0], header=None, dtype=object, keep_default_na=False)
        except Exception as e:
            logger.debug("sheet parse failed file=%s sheet=%s err=%s", file.name, sheet_name, e)
            raise SheetParseError() from e
    return normalize_sheet(df, sheet_name)


def _decode_csv(content: bytes) -> str:
    for encoding in CSV_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise WorkbookReadError()


def _read_csv(content: bytes) -> pd.DataFrame:
    """Parse CSV text with every row padded to the widest row.

    Cells past the header row's width land under "Unnamed: N" columns.
    """
    text = _decode_csv(content)
    try:
        width = max((len(record) for record in csv.reader(io.StringIO(text))), default=0)
    except csv.Error as e:
        raise SheetParseError() from e
    if width == 0:
        raise EmptySheetError()
    try:
        return pd.read_csv(
            io.StringIO(text),
            header=None,
            names=range(width),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as e:
        raise EmptySheetError() from e
    except pd.errors.ParserError as e:
        raise SheetParseError() from e


def to_cell_value(value: Any) -> CellValue:
    """Normalize a pandas cell to text / number / bool / None.

    Integral floats come back as int, so 3.0 and 3 read the same.
    """
    if value is None:
        return None
    if pd.api.types.is_bool(value):
        return bool(value)
    if isinstance(value, str):
        return value if value.strip() else None
    if pd.isna(value):
        return None
    if pd.api.types.is_integer(value):
        return int(value)
    if pd.api.types.is_float(value):
        return int(value) if float(value).is_integer() else float(value)
    return str(value)


def _header_names(raw_header: list[Any]) -> list[str]:
    """Stringify and strip header cells; name blanks and de-duplicate like pandas."""
    columns: list[str] = []
    seen: dict[str, int] = {}
    for idx, cell in enumerate(raw_header):
        text = to_cell_value(cell)
        name = str(text).strip() if text is not None else f"Unnamed: {idx}"
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        columns.append(name)
    return columns


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Apply the first row as header and build RawRows from the rest.

    Raises:
        EmptySheetError: the sheet has no header or no non-blank data row
    """
    if df.shape[0] < 2:
        raise EmptySheetError()
    columns = _header_names(df.iloc[0].tolist())
    rows: list[RawRow] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values = {col: to_cell_value(val) for col, val in zip(columns, raw, strict=False)}
        if all(v is None for v in values.values()):
            continue
        rows.append(RawRow(row_number=len(rows) + 1, values=values))
    if not rows:
        raise EmptySheetError()
    logger.debug("sheet=%s columns=%s rows=%d", sheet_name, columns, len(rows))
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)
