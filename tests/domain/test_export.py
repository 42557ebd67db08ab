from __future__ import annotations

import json
from datetime import UTC, date, datetime

from shelfwise.domain.export import escape_csv, export_entries, export_filename
from shelfwise.domain.model import ExportFormat, ExportType, UnifiedEntry
from tests.helpers.books import make_completed_book, make_library_book

NOW = datetime(2024, 6, 1, 12, 30, tzinfo=UTC)


def _entries() -> list[UnifiedEntry]:
    library = make_library_book(
        "Dune",
        "Frank Herbert",
        isbn="9780441172719",
        date_finished=date(2024, 3, 1),
        tags=["sci-fi", "classic"],
        series_name="Dune Chronicles",
        series_position=1.0,
    )
    completed = make_completed_book('Say "Hello", World', None, page_count=120)
    library.id = 1
    completed.id = 7
    return [UnifiedEntry.project(library), UnifiedEntry.project(completed)]


def test_json_export_envelope() -> None:
    document = export_entries(
        _entries(),
        export_type=ExportType.COMPREHENSIVE,
        export_format=ExportFormat.JSON,
        now=NOW,
    )

    body = json.loads(document.body)
    assert document.filename == "shelfwise-completed-books-comprehensive-2024-06-01.json"
    assert document.content_type == "application/json"
    assert document.count == 2
    assert body["exportedAt"] == NOW.isoformat()
    assert body["exportType"] == "comprehensive"
    assert body["totalBooks"] == 2
    first, second = body["books"]
    assert first["owned"] == "yes"
    assert first["tags"] == ["sci-fi", "classic"]
    assert first["date_finished"] == "2024-03-01"
    assert second["owned"] == "no"
    assert second["page_count"] == 120
    assert "created_at" in first


def test_minimal_export_limits_fields() -> None:
    document = export_entries(
        _entries(),
        export_type=ExportType.MINIMAL,
        export_format=ExportFormat.JSON,
        now=NOW,
    )

    (first, _) = json.loads(document.body)["books"]
    assert list(first) == [
        "isbn",
        "title",
        "author",
        "series_name",
        "series_position",
        "date_finished",
        "owned",
    ]


def test_csv_export_escapes_values() -> None:
    document = export_entries(
        _entries(),
        export_type=ExportType.MINIMAL,
        export_format=ExportFormat.CSV,
        now=NOW,
    )

    assert document.content_type == "text/csv"
    assert document.filename.endswith(".csv")
    assert document.body.splitlines() == [
        "isbn,title,author,series_name,series_position,date_finished,owned",
        "9780441172719,Dune,Frank Herbert,Dune Chronicles,1,2024-03-01,yes",
        ',"Say ""Hello"", World",,,,,no',
    ]


def test_csv_joins_tags() -> None:
    document = export_entries(
        _entries()[:1],
        export_type=ExportType.COMPREHENSIVE,
        export_format=ExportFormat.CSV,
        now=NOW,
    )

    header, row = document.body.splitlines()
    assert header == (
        "isbn,title,author,page_count,genre,synopsis,tags,"
        "series_name,series_position,date_finished,owned,created_at,updated_at"
    )
    assert ",sci-fi; classic," in row


def test_escape_csv() -> None:
    assert escape_csv(None) == ""
    assert escape_csv(2.5) == "2.5"
    assert escape_csv("line\nbreak") == '"line\nbreak"'
    assert escape_csv(["a", "b"]) == "a; b"


def test_export_filename() -> None:
    assert (
        export_filename(ExportType.MINIMAL, ExportFormat.CSV, date(2024, 1, 2))
        == "shelfwise-completed-books-minimal-2024-01-02.csv"
    )


def test_empty_export() -> None:
    document = export_entries(
        [], export_type=ExportType.MINIMAL, export_format=ExportFormat.CSV, now=NOW
    )

    assert document.count == 0
    assert document.body == "isbn,title,author,series_name,series_position,date_finished,owned"
