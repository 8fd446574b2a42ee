"""
app/parsers/spreadsheet_parser.py

Structural parsing of validated uploads into ordered, loosely-typed rows.

CSV files are read with the first line as header. Spreadsheets are read
from their first worksheet only, using its first non-blank row as header.
Parsing is a pure transformation of the uploaded bytes.
"""

from __future__ import annotations

import csv
import io
import logging
import struct
import zipfile
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time
from typing import Any

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from app import failure_codes
from app.domain.contact import ParsedRow, ParsedSheet
from app.domain.errors import (
    EmptyWorksheetError,
    MalformedFileError,
    NoWorksheetsError,
    UnsupportedFormatError,
)
from app.domain.upload import FileFormat, ValidatedUpload

logger = logging.getLogger(__name__)

_EXCEL_ERRORS: tuple[type[BaseException], ...] = (
    InvalidFileException,
    zipfile.BadZipFile,
    xlrd.XLRDError,
    CompDocError,
    struct.error,
    KeyError,
    ValueError,
    IndexError,
    OSError,
)


def stringify_cell(value: Any) -> str:
    """
    Render one cell value as text the way a spreadsheet user typed it.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _is_blank(values: Iterable[Any]) -> bool:
    return all(stringify_cell(value).strip() == "" for value in values)


class SpreadsheetParser:
    """
    Turns validated CSV, XLS, and XLSX uploads into a ParsedSheet.
    """

    def parse(self, upload: ValidatedUpload) -> ParsedSheet:
        if upload.file_format is FileFormat.CSV:
            sheet = self.parse_csv(upload.content)
        elif upload.file_format is FileFormat.XLSX:
            sheet = self.parse_xlsx(upload.content)
        elif upload.file_format is FileFormat.XLS:
            sheet = self.parse_xls(upload.content)
        else:
            raise UnsupportedFormatError(
                "Unsupported file format. Only CSV, XLSX, and XLS files are supported."
            )

        logger.debug(
            "Parsed upload file=%s format=%s headers=%d rows=%d",
            upload.filename,
            upload.file_format.value,
            len(sheet.headers),
            sheet.row_count,
        )
        return sheet

    def parse_csv(self, content: bytes) -> ParsedSheet:
        """
        Parse CSV bytes using the first line as header.

        Header text is kept exactly as written; blank lines and rows whose
        cells are all empty are skipped.
        """

        text_stream = io.TextIOWrapper(io.BytesIO(content), encoding="utf-8-sig", newline="")
        try:
            reader = csv.DictReader(text_stream)
            headers = tuple(reader.fieldnames or ())
            rows: list[ParsedRow] = []
            for raw_row in reader:
                row = {
                    header: value if isinstance(value, str) else ""
                    for header, value in raw_row.items()
                    if header is not None
                }
                if _is_blank(row.values()):
                    continue
                rows.append(row)
        except UnicodeDecodeError as exc:
            raise MalformedFileError(
                "CSV must be UTF-8 encoded.",
                code=failure_codes.CSV_PARSE_ERROR,
                details={"reason": str(exc)},
            ) from exc
        except csv.Error as exc:
            raise MalformedFileError(
                "Error parsing CSV file",
                code=failure_codes.CSV_PARSE_ERROR,
                details={"reason": str(exc)},
            ) from exc
        finally:
            text_stream.detach()

        return ParsedSheet(headers=headers, rows=rows)

    def parse_xlsx(self, content: bytes) -> ParsedSheet:
        try:
            workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except _EXCEL_ERRORS as exc:
            raise self._excel_error(exc) from exc

        try:
            if not workbook.worksheets:
                raise NoWorksheetsError("No worksheets found in the Excel file")
            worksheet = workbook.worksheets[0]
            matrix = [list(row) for row in worksheet.iter_rows(values_only=True)]
        except _EXCEL_ERRORS as exc:
            raise self._excel_error(exc) from exc
        finally:
            workbook.close()

        return self._sheet_from_matrix(matrix)

    def parse_xls(self, content: bytes) -> ParsedSheet:
        try:
            book = xlrd.open_workbook(file_contents=content, on_demand=True)
        except _EXCEL_ERRORS as exc:
            raise self._excel_error(exc) from exc

        try:
            if book.nsheets == 0:
                raise NoWorksheetsError("No worksheets found in the Excel file")
            sheet = book.sheet_by_index(0)
            matrix = [
                [self._xls_cell_value(cell, book.datemode) for cell in sheet.row(index)]
                for index in range(sheet.nrows)
            ]
        except _EXCEL_ERRORS as exc:
            raise self._excel_error(exc) from exc
        finally:
            book.release_resources()

        return self._sheet_from_matrix(matrix)

    @staticmethod
    def _xls_cell_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate_as_datetime(cell.value, datemode)
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
            return None
        return cell.value

    @staticmethod
    def _sheet_from_matrix(matrix: Sequence[Sequence[Any]]) -> ParsedSheet:
        non_blank = [row for row in matrix if not _is_blank(row)]
        if not non_blank:
            raise EmptyWorksheetError("The worksheet is empty or contains no data")

        header_cells = [stringify_cell(value) for value in non_blank[0]]
        columns = [
            (position, header)
            for position, header in enumerate(header_cells)
            if header.strip()
        ]
        headers = tuple(header for _, header in columns)

        rows: list[ParsedRow] = []
        for values in non_blank[1:]:
            rows.append(
                {
                    header: stringify_cell(values[position]) if position < len(values) else ""
                    for position, header in columns
                }
            )

        if not rows:
            raise EmptyWorksheetError("The worksheet is empty or contains no data")
        return ParsedSheet(headers=headers, rows=rows)

    @staticmethod
    def _excel_error(exc: BaseException) -> MalformedFileError:
        return MalformedFileError(
            "Error parsing Excel file",
            code=failure_codes.EXCEL_PARSE_ERROR,
            details={"reason": str(exc) or exc.__class__.__name__},
        )
