"""Turn statement workbooks and HTML tables into rows of cell text."""
from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterator, Sequence
from xml.etree.ElementTree import ParseError
from zipfile import BadZipFile

import xlrd
from bs4 import BeautifulSoup
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from statement_ingest.config import SETTINGS
from statement_ingest.domain.errors import FormatError
from statement_ingest.logging_setup import get_logger

logger = get_logger(__name__)

Row = list[str]

OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_SIGNATURE = b"PK\x03\x04"
HTML_MARKERS = (b"<!doctype html", b"<html", b"<table", b"<meta", b"<head", b"<body")

XLSX_EXTENSIONS = (".xlsx", ".xlsm")
XLS_EXTENSIONS = (".xls",)
HTML_EXTENSIONS = (".html", ".htm")


def ensure_bytes(source: BinaryIO | BytesIO | Path | bytes) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    if hasattr(source, "read"):
        if hasattr(source, "seek"):
            source.seek(0)
        return source.read()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def _looks_like_html(data: bytes) -> bool:
    head = data[:2048].lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    return any(marker in head for marker in HTML_MARKERS)


def detect_container(data: bytes, file_name: str) -> str:
    """Return ``"xlsx"``, ``"xls"`` or ``"html"`` for the given payload.

    The extension picks the expected container; the leading bytes override it
    because brokers routinely ship HTML exports under an ``.xls`` name.
    """
    extension = Path(file_name).suffix.lower()
    if extension in HTML_EXTENSIONS:
        return "html"
    if extension not in XLSX_EXTENSIONS + XLS_EXTENSIONS:
        raise FormatError(f"Unsupported file extension: {extension or '(none)'}")

    if data.startswith(ZIP_SIGNATURE):
        return "xlsx"
    if data.startswith(OLE2_SIGNATURE):
        return "xls"
    if _looks_like_html(data):
        return "html"
    return "xlsx" if extension in XLSX_EXTENSIONS else "xls"


def format_number(value: float | int | Decimal) -> str:
    """Render a numeric cell the way the es-AR statement locale writes it."""
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    text = format(Decimal(repr(value)) if isinstance(value, float) else value, "f")
    return text.replace(".", ",")


def format_cell_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, (int, float, Decimal)):
        return format_number(value)
    return str(value).strip()


def _pad(row: Sequence[str], min_columns: int) -> Row:
    cells = list(row)
    if len(cells) < min_columns:
        cells.extend([""] * (min_columns - len(cells)))
    return cells


def _is_blank(row: Sequence[str]) -> bool:
    return all(not cell.strip() for cell in row)


def _iter_xlsx(data: bytes) -> Iterator[Row]:
    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, ParseError, KeyError, ValueError, OSError) as exc:
        raise FormatError(f"Could not read workbook: {exc}") from exc
    if not workbook.worksheets:
        workbook.close()
        raise FormatError("Workbook has no sheets")
    sheet = workbook.worksheets[0]

    def rows() -> Iterator[Row]:
        # Sheet XML is only parsed here, while rows are pulled.
        try:
            for cells in sheet.iter_rows():
                row: Row = []
                for cell in cells:
                    # Error results ("#DIV/0!") count as failed evaluations.
                    if getattr(cell, "data_type", None) == "e":
                        row.append("")
                    else:
                        row.append(format_cell_value(cell.value))
                yield row
        except (ParseError, BadZipFile, KeyError, ValueError, EOFError) as exc:
            raise FormatError(f"Could not read worksheet: {exc}") from exc
        finally:
            workbook.close()

    return rows()


def _xls_cell_text(cell: xlrd.sheet.Cell, datemode: int) -> str:
    ctype = cell.ctype
    if ctype == xlrd.XL_CELL_TEXT:
        return str(cell.value).strip()
    if ctype == xlrd.XL_CELL_DATE:
        try:
            return xlrd.xldate.xldate_as_datetime(cell.value, datemode).strftime("%d/%m/%Y")
        except (xlrd.xldate.XLDateError, ValueError, OverflowError):
            return format_number(cell.value)
    if ctype == xlrd.XL_CELL_NUMBER:
        return format_number(cell.value)
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return "true" if cell.value else "false"
    return ""


def _iter_xls(data: bytes) -> Iterator[Row]:
    try:
        book = xlrd.open_workbook(file_contents=data)
    except (xlrd.XLRDError, CompDocError, EOFError, ValueError, AssertionError) as exc:
        raise FormatError(f"Could not read workbook: {exc}") from exc
    if book.nsheets == 0:
        raise FormatError("Workbook has no sheets")
    sheet = book.sheet_by_index(0)

    def rows() -> Iterator[Row]:
        for rowx in range(sheet.nrows):
            try:
                row = [_xls_cell_text(cell, book.datemode) for cell in sheet.row(rowx)]
            except (xlrd.XLRDError, IndexError, ValueError) as exc:
                raise FormatError(f"Could not read worksheet row {rowx + 1}: {exc}") from exc
            yield row

    return rows()


def _iter_html(data: bytes) -> Iterator[Row]:
    soup = BeautifulSoup(data, "html.parser")
    table = soup.find("table")
    if table is None:
        raise FormatError("No <table> found in HTML document")

    def rows() -> Iterator[Row]:
        for tr in table.find_all("tr"):
            yield [
                " ".join(cell.get_text(" ").split())
                for cell in tr.find_all(["td", "th"], recursive=False)
            ]

    return rows()


_DECODERS = {
    "xlsx": _iter_xlsx,
    "xls": _iter_xls,
    "html": _iter_html,
}


def extract_rows(
    source: BinaryIO | BytesIO | Path | bytes,
    file_name: str,
    min_columns: int | None = None,
) -> Iterator[Row]:
    """Open ``source`` and return a lazy iterator over its non-empty rows.

    The container is opened eagerly so that :class:`FormatError` surfaces
    here; rows are then produced one by one, right-padded to ``min_columns``.
    """
    min_columns = SETTINGS.min_columns if min_columns is None else min_columns
    data = ensure_bytes(source)
    if not data:
        raise FormatError("File is empty")
    container = detect_container(data, file_name)
    logger.debug("Reading %s as %s (%d bytes)", file_name, container, len(data))
    raw_rows = _DECODERS[container](data)
    return (_pad(row, min_columns) for row in raw_rows if not _is_blank(row))
