"""Decoding of raw import payloads into header-keyed rows.

This is the only place that sees untyped import data. Everything downstream
works on :class:`~shelfwise.domain.importing.rows.NormalizedImportRow`.
"""

from __future__ import annotations

import base64
import binascii
import csv
import io
import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Final

import pandas as pd

from shelfwise.domain.errors import ImportParseError
from shelfwise.domain.model import ImportFormat

log = logging.getLogger(__name__)

type RawRow = dict[str, object]

UNSUPPORTED_FORMAT_MESSAGE: Final[str] = "Unsupported format. Use json, csv, xlsx, or xls"
CSV_TOO_SHORT_MESSAGE: Final[str] = "CSV file must have a header row and at least one data row"
SHEET_TOO_SHORT_MESSAGE: Final[str] = "Spreadsheet must have a header row and at least one data row"

_WHITESPACE = re.compile(r"\s+")
_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class RawTable:
    headers: tuple[str, ...]
    rows: tuple[RawRow, ...]
    has_header_row: bool


def normalize_header(name: object) -> str:
    """``"Author l-f"`` -> ``"author_l-f"``."""

    return _WHITESPACE.sub("_", str(name).strip().lower())


def parse_import_format(value: ImportFormat | str) -> ImportFormat:
    try:
        return ImportFormat(str(value).strip().lower())
    except ValueError as exc:
        raise ImportParseError(UNSUPPORTED_FORMAT_MESSAGE) from exc


def read_source(data: object, import_format: ImportFormat | str) -> RawTable:
    fmt = parse_import_format(import_format)
    match fmt:
        case ImportFormat.JSON:
            return _read_json(data)
        case ImportFormat.CSV:
            return _read_csv(data)
        case ImportFormat.XLSX | ImportFormat.XLS:
            return _read_spreadsheet(data, fmt)


def _read_json(data: object) -> RawTable:
    payload = data
    if isinstance(data, str | bytes):
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ImportParseError(f"Invalid JSON: {exc.msg}") from exc

    if isinstance(payload, dict) and isinstance(payload.get("books"), list):
        payload = payload["books"]
    if not isinstance(payload, list):
        raise ImportParseError("JSON must be an array of books or an object with a 'books' array")

    headers: dict[str, None] = {}
    rows: list[RawRow] = []
    for position, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ImportParseError(f"JSON book entry {position} is not an object")
        row = {normalize_header(key): value for key, value in item.items()}
        headers.update(dict.fromkeys(row))
        rows.append(row)
    return RawTable(headers=tuple(headers), rows=tuple(rows), has_header_row=False)


def _read_csv(data: object) -> RawTable:
    if isinstance(data, bytes):
        text = data.decode("utf-8-sig")
    elif isinstance(data, str):
        text = data.removeprefix("\ufeff")
    else:
        raise ImportParseError("CSV data must be text")

    records = [
        record
        for record in csv.reader(io.StringIO(text))
        if any(cell.strip() for cell in record)
    ]
    if len(records) < 2:
        raise ImportParseError(CSV_TOO_SHORT_MESSAGE)

    headers = tuple(normalize_header(cell) for cell in records[0])
    rows = tuple(
        {
            header: record[index].strip() if index < len(record) else ""
            for index, header in enumerate(headers)
        }
        for record in records[1:]
    )
    return RawTable(headers=headers, rows=rows, has_header_row=True)


def _read_spreadsheet(data: object, fmt: ImportFormat) -> RawTable:
    content = _spreadsheet_bytes(data)
    engine = "openpyxl" if fmt is ImportFormat.XLSX else "xlrd"
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object, engine=engine)
    except Exception as exc:  # noqa: BLE001 - engines raise assorted types for corrupt files
        raise ImportParseError(f"Could not read {fmt} spreadsheet: {exc}") from exc

    if frame.empty:
        raise ImportParseError(SHEET_TOO_SHORT_MESSAGE)

    headers = tuple(normalize_header(column) for column in frame.columns)
    rows = tuple(
        {header: _cell(value) for header, value in zip(headers, record, strict=True)}
        for record in frame.itertuples(index=False, name=None)
    )
    log.debug("Read %s spreadsheet with %d rows", fmt, len(rows))
    return RawTable(headers=headers, rows=rows, has_header_row=True)


def _spreadsheet_bytes(data: object) -> bytes:
    if isinstance(data, bytes | bytearray):
        return bytes(data)
    if not isinstance(data, str):
        raise ImportParseError("Spreadsheet data must be base64 text or bytes")
    encoded = _DATA_URL_PREFIX.sub("", data.strip())
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImportParseError("Spreadsheet data is not valid base64") from exc


def _cell(value: object) -> object:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        return value.strip()
    return value
