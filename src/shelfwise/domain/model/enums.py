"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ReadingStatus(StrEnum):
    UNREAD = "unread"
    READING = "reading"
    READ = "read"


class EntrySource(StrEnum):
    """Which table a unified entry was projected from."""

    LIBRARY = "library"
    COMPLETED = "completed"


class ImportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"
    XLSX = "xlsx"
    XLS = "xls"

    @property
    def is_spreadsheet(self) -> bool:
        return self in {ImportFormat.XLSX, ImportFormat.XLS}


class ImportDialect(StrEnum):
    GENERIC = "generic"
    GOODREADS = "goodreads"


class ExportType(StrEnum):
    MINIMAL = "minimal"
    COMPREHENSIVE = "comprehensive"


class ExportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"
