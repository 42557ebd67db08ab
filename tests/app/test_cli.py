from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from shelfwise.domain.errors import PromotionInvariantViolation
from shelfwise.domain.importing import ResolutionReport
from shelfwise.domain.model import (
    CompletedEntryId,
    CompletedRating,
    ImportFormat,
    UnifiedEntry,
)
from shelfwise.domain.promotion import PromotionResult
from shelfwise.ui import cli

if TYPE_CHECKING:
    from pathlib import Path

STAMP = datetime(2024, 1, 1, tzinfo=UTC)


def _entry() -> UnifiedEntry:
    return UnifiedEntry(
        entry_id=CompletedEntryId(5),
        title="Dune",
        author="Frank Herbert",
        isbn=None,
        page_count=None,
        genre=None,
        synopsis=None,
        tags=(),
        series_name=None,
        series_position=None,
        date_finished=None,
        owned=False,
        created_at=STAMP,
        updated_at=STAMP,
    )


def test_list_prints_entries(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_list(**kwargs: object) -> list[UnifiedEntry]:
        captured.update(kwargs)
        return [_entry()]

    monkeypatch.setattr(cli, "list_completed_books", fake_list)

    cli.main(["--user-id", "7", "list"])

    assert captured == {"user_id": 7}
    (printed,) = json.loads(capsys.readouterr().out)
    assert printed["id"] == "completed_5"


def test_import_parse_infers_format(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    source = tmp_path / "books.json"
    source.write_text(json.dumps([{"title": "Dune"}]), encoding="utf-8")
    captured: dict[str, object] = {}

    def fake_parse(data: object, import_format: ImportFormat, **kwargs: object) -> ResolutionReport:
        captured.update(data=data, import_format=import_format, **kwargs)
        return ResolutionReport(results=(), skipped_shelves=1)

    monkeypatch.setattr(cli, "parse_import", fake_parse)

    cli.main(["--user-id", "1", "import-parse", str(source)])

    assert captured == {
        "data": [{"title": "Dune"}],
        "import_format": ImportFormat.JSON,
        "user_id": 1,
    }
    assert json.loads(capsys.readouterr().out)["skippedShelves"] == 1


def test_import_parse_reads_spreadsheets_as_bytes(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    source = tmp_path / "export.bin"
    source.write_bytes(b"PK\x03\x04")
    report_path = tmp_path / "report.json"
    captured: dict[str, object] = {}

    def fake_parse(data: object, import_format: ImportFormat, **_: object) -> ResolutionReport:
        captured.update(data=data, import_format=import_format)
        return ResolutionReport(results=())

    monkeypatch.setattr(cli, "parse_import", fake_parse)

    cli.main(
        [
            "--user-id",
            "1",
            "import-parse",
            str(source),
            "--format",
            "xlsx",
            "--output",
            str(report_path),
        ]
    )

    assert captured == {"data": b"PK\x03\x04", "import_format": ImportFormat.XLSX}
    assert json.loads(report_path.read_text(encoding="utf-8"))["total"] == 0


def test_import_parse_unknown_extension(tmp_path: Path) -> None:
    source = tmp_path / "books.txt"
    source.write_text("title\nDune\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--user-id", "1", "import-parse", str(source)])

    assert excinfo.value.code == 2


def test_missing_user_id_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["list"])

    assert excinfo.value.code == 2


def test_export_passes_options(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    captured: dict[str, object] = {}

    def fake_export(**kwargs: object) -> Path:
        captured.update(kwargs)
        return tmp_path / "out.csv"

    monkeypatch.setattr(cli, "export_completed_books", fake_export)

    cli.main(["--user-id", "1", "export", "--type", "minimal", "--format", "csv"])

    assert captured == {
        "user_id": 1,
        "export_type": "minimal",
        "export_format": "csv",
        "output_dir": None,
    }
    assert json.loads(capsys.readouterr().out) == {"path": str(tmp_path / "out.csv")}


def test_promote_prints_result(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        cli,
        "promote",
        lambda entry_id, **_: PromotionResult(library_book_id=9, merged=True),
    )

    cli.main(["--user-id", "1", "promote", "completed_3"])

    printed = json.loads(capsys.readouterr().out)
    assert printed == {
        "message": "Book already exists in library, merged and updated",
        "libraryBookId": 9,
    }


def test_command_failure_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_promote(entry_id: str, **_: object) -> PromotionResult:
        raise PromotionInvariantViolation("Book is already in your library")

    monkeypatch.setattr(cli, "promote", fake_promote)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--user-id", "1", "promote", "library_3"])

    assert excinfo.value.code == 1


def test_rate_and_show(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    rating = CompletedRating(
        book_id=5, user_id=1, rating=4, comment="good", created_at=STAMP, updated_at=STAMP
    )
    calls: list[tuple[object, ...]] = []

    def fake_save(
        entry_id: str, value: int, comment: str | None, **_: object
    ) -> tuple[CompletedRating, bool]:
        calls.append((entry_id, value, comment))
        return rating, True

    monkeypatch.setattr(cli, "save_rating", fake_save)
    monkeypatch.setattr(cli, "get_entry", lambda entry_id, **_: _entry())
    monkeypatch.setattr(cli, "get_rating", lambda entry_id, **_: rating)

    cli.main(["--user-id", "1", "rate", "completed_5", "--rating", "4", "--comment", "good"])
    assert json.loads(capsys.readouterr().out)["rating"] == 4

    cli.main(["--user-id", "1", "show", "completed_5"])
    shown = json.loads(capsys.readouterr().out)

    assert calls == [("completed_5", 4, "good")]
    assert shown["title"] == "Dune"
    assert shown["rating"]["comment"] == "good"
