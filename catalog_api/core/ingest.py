# catalog_api/core/ingest.py

"""
Tabular ingestion for supplier price lists and catalogs.

Turns an uploaded CSV/TSV/XLSX/XLS file into sanitized headers and one
row mapping per non-blank line. Spreadsheet formats are decoded by an
injected decoder so header and row handling stay format-agnostic.
"""

import io
import logging
import re
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Mapping, Optional

import xlrd
from openpyxl import load_workbook

from catalog_api.models import ParsedFile, ParsedRow

logger = logging.getLogger(__name__)

EMPTY_HEADER_PREFIX = "column_"
SPREADSHEET_EXTENSIONS = ("xlsx", "xls")
TEXT_EXTENSIONS = ("csv", "tsv", "txt")

# Delimiter precedence for text files: first one present in the header line wins
DELIMITERS = ("\t", ";", ",")
TEXT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")

Matrix = list[list[str]]
SpreadsheetDecoder = Callable[[bytes], Matrix]

_LINE_BREAK = re.compile(r"\r?\n")
_EDGE_QUOTES = re.compile(r'^"|"$')


class CatalogImportError(Exception):
    """Base class for structural import failures."""


class FileFormatError(CatalogImportError):
    """The file cannot be read, has no sheets, or has no data rows."""


# ============================================
# Cell helpers
# ============================================

def cell_to_str(value: Any) -> str:
    """Render a decoded spreadsheet cell the way it reads on screen."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _is_blank_row(values: Iterable[str]) -> bool:
    return all(not v.strip() for v in values)


def is_row_empty(row: ParsedRow) -> bool:
    """True when every value in the row is blank."""
    return all(not str(v if v is not None else "").strip() for v in row.values())


# ============================================
# Spreadsheet decoders
# ============================================

def decode_xlsx(content: bytes) -> Matrix:
    """Decode the first worksheet of an XLSX workbook with openpyxl."""
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise FileFormatError(f"Could not read XLSX file: {e}") from e

    try:
        if not workbook.sheetnames:
            raise FileFormatError("The XLSX file has no sheets")

        sheet = workbook[workbook.sheetnames[0]]
        matrix = []
        for row in sheet.iter_rows(values_only=True):
            values = [cell_to_str(v) for v in row]
            if not _is_blank_row(values):
                matrix.append(values)
        return matrix
    finally:
        workbook.close()


def decode_xls(content: bytes) -> Matrix:
    """Decode the first sheet of a legacy XLS workbook with xlrd."""
    try:
        book = xlrd.open_workbook(file_contents=content)
    except Exception as e:
        raise FileFormatError(f"Could not read XLS file: {e}") from e

    if book.nsheets == 0:
        raise FileFormatError("The XLS file has no sheets")

    sheet = book.sheet_by_index(0)
    matrix = []
    for row_idx in range(sheet.nrows):
        values = []
        for cell in sheet.row(row_idx):
            value = cell.value
            if cell.ctype == xlrd.XL_CELL_DATE:
                value = xlrd.xldate_as_datetime(value, book.datemode)
            elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                value = bool(value)
            values.append(cell_to_str(value))
        if not _is_blank_row(values):
            matrix.append(values)
    return matrix


DEFAULT_DECODERS: dict[str, SpreadsheetDecoder] = {
    "xlsx": decode_xlsx,
    "xls": decode_xls,
}


# ============================================
# Delimited text
# ============================================

def decode_text(content: bytes) -> str:
    """Decode text bytes, trying UTF-8 first and falling back to Windows/Latin-1."""
    for encoding in TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise FileFormatError("Could not decode text file")


def detect_delimiter(line: str) -> str:
    """Tab, then semicolon, then comma."""
    for delimiter in DELIMITERS:
        if delimiter in line:
            return delimiter
    return ","


def split_delimited(text: str) -> Matrix:
    """
    Split delimited text into a matrix of cells.

    Whitespace-only lines are dropped. Cells lose one leading and one
    trailing double quote; quoted delimiters are not supported.
    """
    lines = [line for line in _LINE_BREAK.split(text) if line.strip()]
    if not lines:
        return []

    delimiter = detect_delimiter(lines[0])
    logger.debug("Detected delimiter %r", delimiter)

    return [
        [_EDGE_QUOTES.sub("", value) for value in line.split(delimiter)]
        for line in lines
    ]


# ============================================
# Headers and rows
# ============================================

def sanitize_headers(raw_headers: list[Any]) -> list[str]:
    """
    Make headers non-blank and pairwise distinct.

    Blank headers become "column_<n>" (1-based). A header that collides
    with an earlier one gets the smallest free "_<k>" suffix, k >= 2.

    ["a", "", "a"] -> ["a", "column_2", "a_2"]
    """
    used: set[str] = set()
    headers = []

    for index, header in enumerate(raw_headers):
        base = cell_to_str(header).strip() or f"{EMPTY_HEADER_PREFIX}{index + 1}"

        candidate = base
        suffix = 2
        while candidate in used:
            candidate = f"{base}_{suffix}"
            suffix += 1

        used.add(candidate)
        headers.append(candidate)

    return headers


def build_rows(headers: list[str], data_rows: Matrix) -> list[ParsedRow]:
    """
    Zip data rows onto headers.

    Cells are trimmed, extra cells are dropped, missing trailing cells
    default to "". Rows with every value blank are discarded.
    """
    rows = []
    for raw_row in data_rows:
        values = [cell_to_str(v).strip() for v in raw_row]
        row = {
            header: values[i] if i < len(values) else ""
            for i, header in enumerate(headers)
        }
        if not is_row_empty(row):
            rows.append(row)
    return rows


def file_extension(filename: Optional[str]) -> str:
    """Lowercased extension without the dot, "" when there is none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def parse_import_file(
    content: bytes,
    filename: str,
    decoders: Optional[Mapping[str, SpreadsheetDecoder]] = None,
) -> ParsedFile:
    """
    Parse an uploaded file into headers and rows.

    Args:
        content: Raw file bytes
        filename: Declared file name, only its extension is used
        decoders: Spreadsheet decoders by extension (defaults to openpyxl/xlrd)

    Returns:
        ParsedFile with sanitized headers and non-blank rows

    Raises:
        FileFormatError: no sheets, undecodable file, or no data rows
    """
    extension = file_extension(filename)
    decoders = DEFAULT_DECODERS if decoders is None else decoders

    if extension in SPREADSHEET_EXTENSIONS:
        decoder = decoders.get(extension)
        if decoder is None:
            raise FileFormatError(f"No decoder available for .{extension} files")
        matrix = [row for row in decoder(content) if not _is_blank_row(cell_to_str(v) for v in row)]
    else:
        matrix = split_delimited(decode_text(content))

    if len(matrix) < 2:
        raise FileFormatError("The file is empty or has no data rows")

    headers = sanitize_headers(matrix[0])
    rows = build_rows(headers, matrix[1:])

    logger.debug(
        "Parsed %s: %d columns, %d rows (%d lines read)",
        filename, len(headers), len(rows), len(matrix) - 1,
    )
    return ParsedFile(headers=headers, rows=rows)
