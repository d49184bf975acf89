"""File parsing functions for CSV, XLSX and XLS member imports."""

import csv
import io
import logging
from collections.abc import Iterator, Sequence
from datetime import date, datetime, time
from typing import Any

import xlrd
from openpyxl import load_workbook

from memberimport.schemas.import_schemas import SourceTable

from .constants import CSV_EXTENSIONS, MAX_ROWS, WORKBOOK_EXTENSIONS
from .errors import ParseError

logger = logging.getLogger(__name__)


def get_file_extension(filename: str | None) -> str:
    """Extract the lower-cased file extension from a filename."""
    if not filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _cell_to_str(value: Any) -> str:
    """Render a spreadsheet cell as a trimmed string ("" for empty cells)."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # Phone numbers and years come back from workbooks as floats
        return str(int(value))
    return str(value).strip()


def _collect_rows(
    row_iter: Iterator[Sequence[Any]],
    kind: str,
    max_rows: int,
) -> tuple[list[str], list[dict[str, str]]]:
    """Turn a positional row iterator into headers and header-keyed rows.

    The first row supplies the headers. Blank header cells are dropped but
    data cells stay aligned with the column they were read from.
    """
    try:
        raw_headers = next(row_iter)
    except StopIteration:
        raise ParseError(f"No data found in {kind} file")

    columns = [(j, _cell_to_str(h)) for j, h in enumerate(raw_headers)]
    columns = [(j, h) for j, h in columns if h]
    headers = [h for _, h in columns]
    _check_headers(headers, kind)

    rows: list[dict[str, str]] = []
    for row_values in row_iter:
        if len(rows) >= max_rows:
            logger.warning("%s file exceeds %d rows, extra rows ignored", kind, max_rows)
            break
        row = {
            header: _cell_to_str(row_values[j]) if j < len(row_values) else ""
            for j, header in columns
        }
        if any(row.values()):
            rows.append(row)

    return headers, rows


def _check_headers(headers: list[str], kind: str) -> None:
    if not headers:
        raise ParseError(f"No columns found in {kind} file")
    seen: set[str] = set()
    for header in headers:
        if header in seen:
            raise ParseError(f"Duplicate column '{header}' in {kind} file")
        seen.add(header)


def parse_csv(file_content: bytes, max_rows: int = MAX_ROWS) -> tuple[list[str], list[dict[str, str]]]:
    """Parse CSV file content into headers and rows.

    Tries UTF-8 (with or without BOM) first, falls back to Latin-1.

    Args:
        file_content: Raw CSV file bytes.
        max_rows: Maximum number of data rows to keep.

    Returns:
        Tuple of (headers, rows) where rows are dicts keyed by header name.

    Raises:
        ParseError: If the CSV is malformed or has no headers.
    """
    try:
        text = file_content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = file_content.decode("latin-1")

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        return _collect_rows(reader, "CSV", max_rows)
    except csv.Error as e:
        raise ParseError(f"CSV parsing error: {e}") from e


def parse_xlsx(file_content: bytes, max_rows: int = MAX_ROWS) -> tuple[list[str], list[dict[str, str]]]:
    """Parse XLSX file content into headers and rows (first sheet only).

    Uses openpyxl read_only mode and iterates rows lazily to avoid loading
    the entire sheet into memory at once.

    Raises:
        ParseError: If the workbook is corrupt, empty, or has no headers.
    """
    try:
        wb = load_workbook(filename=io.BytesIO(file_content), read_only=True, data_only=True)
    except Exception as e:
        raise ParseError(f"Failed to parse file: {e}") from e

    try:
        if not wb.worksheets:
            raise ParseError("Excel file has no worksheets")
        ws = wb.worksheets[0]
        # read_only sheets are parsed lazily, so corrupt sheet XML surfaces here
        try:
            return _collect_rows(ws.iter_rows(values_only=True), "Excel", max_rows)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Failed to parse file: {e}") from e
    finally:
        wb.close()


def _xls_rows(book, sheet) -> Iterator[list[Any]]:
    for i in range(sheet.nrows):
        values: list[Any] = []
        for cell in sheet.row(i):
            if cell.ctype == xlrd.XL_CELL_DATE:
                values.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
            elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                values.append(None)
            else:
                values.append(cell.value)
        yield values


def parse_xls(file_content: bytes, max_rows: int = MAX_ROWS) -> tuple[list[str], list[dict[str, str]]]:
    """Parse a legacy XLS workbook (first sheet only) with xlrd.

    Raises:
        ParseError: If the workbook is corrupt, empty, or has no headers.
    """
    try:
        book = xlrd.open_workbook(file_contents=file_content)
    except Exception as e:
        raise ParseError(f"Failed to parse file: {e}") from e

    if book.nsheets == 0:
        raise ParseError("Excel file has no worksheets")
    sheet = book.sheet_by_index(0)
    return _collect_rows(_xls_rows(book, sheet), "Excel", max_rows)


def ingest(file_content: bytes, filename: str, max_rows: int = MAX_ROWS) -> SourceTable:
    """Parse an uploaded file into a SourceTable, choosing the parser by extension.

    Args:
        file_content: Raw file bytes.
        filename: Original filename; its extension selects the format.
        max_rows: Maximum number of data rows to keep.

    Returns:
        The immutable parsed table.

    Raises:
        ParseError: If the type is unsupported or the file yields no headers
            or no data rows.
    """
    ext = get_file_extension(filename)
    if ext in CSV_EXTENSIONS:
        headers, rows = parse_csv(file_content, max_rows)
        kind = "CSV"
    elif ext == "xlsx":
        headers, rows = parse_xlsx(file_content, max_rows)
        kind = "Excel"
    elif ext in WORKBOOK_EXTENSIONS:
        headers, rows = parse_xls(file_content, max_rows)
        kind = "Excel"
    else:
        raise ParseError(f"Unsupported file type '.{ext}'. Allowed: CSV, XLSX, XLS")

    if not rows:
        raise ParseError(f"No data rows found in {kind} file")

    logger.debug("Parsed %s: %d columns, %d rows", filename, len(headers), len(rows))
    return SourceTable(headers=tuple(headers), rows=tuple(rows))
