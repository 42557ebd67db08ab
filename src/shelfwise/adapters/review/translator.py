"""Translate between review payloads and the import/entry domain types."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from shelfwise.domain.errors import ImportValidationError
from shelfwise.domain.importing import (
    Duplicate,
    Found,
    ImportCommitRequest,
    Invalid,
    LibraryUpdate,
    LibraryUpdateRequest,
    NeedsReview,
    NormalizedImportRow,
)
from shelfwise.domain.model import format_unified_id

from .schema import ReviewedBook, ReviewedCommit

if TYPE_CHECKING:
    from datetime import date, datetime

    from shelfwise.domain.importing import CommitResult, ResolutionOutcome, ResolutionReport
    from shelfwise.domain.model import Rating, UnifiedEntry

type Payload = dict[str, object]


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid import payload at {location}: {first['msg']}"


def book_from_payload(book: ReviewedBook) -> NormalizedImportRow:
    return NormalizedImportRow(
        title=book.title.strip(),
        author=book.author,
        isbn=book.isbn,
        page_count=book.page_count,
        genre=book.genre,
        synopsis=book.synopsis,
        tags=book.tags,
        series_name=book.series_name,
        series_position=book.series_position,
        date_finished=book.date_finished,
        owned_flag=book.owned,
        owned_copies=book.owned_copies,
    )


def to_commit_request(payload: object) -> ImportCommitRequest:
    """Validate an operator-approved commit payload."""

    try:
        reviewed = ReviewedCommit.model_validate(payload)
    except ValidationError as exc:
        raise ImportValidationError(_validation_message(exc)) from exc

    return ImportCommitRequest(
        books_to_import=tuple(book_from_payload(book) for book in reviewed.books_to_import),
        library_updates=tuple(
            LibraryUpdateRequest(
                library_book_id=update.library_book_id,
                new_date_finished=update.new_date_finished,
                library_title=update.library_title,
            )
            for update in reviewed.library_updates
        ),
    )


def to_book_row(payload: object) -> NormalizedImportRow:
    """Validate a single manually entered book."""

    try:
        return book_from_payload(ReviewedBook.model_validate(payload))
    except ValidationError as exc:
        raise ImportValidationError(_validation_message(exc)) from exc


def row_to_payload(row: NormalizedImportRow) -> Payload:
    return {
        "title": row.title,
        "author": row.author,
        "isbn": row.isbn,
        "page_count": row.page_count,
        "genre": row.genre,
        "synopsis": row.synopsis,
        "tags": list(row.tags),
        "series_name": row.series_name,
        "series_position": row.series_position,
        "date_finished": _iso(row.date_finished),
        "owned": row.owned,
    }


def outcome_to_payload(outcome: ResolutionOutcome) -> Payload:
    payload: Payload = {
        "index": outcome.index,
        "status": outcome.kind,
        "original": row_to_payload(outcome.row),
    }
    match outcome:
        case Found(metadata=metadata):
            payload["metadata"] = row_to_payload(metadata)
        case LibraryUpdate():
            payload.update(
                libraryBookId=outcome.library_book_id,
                libraryTitle=outcome.library_title,
                currentStatus=str(outcome.current_status),
                currentDateFinished=_iso(outcome.current_date_finished),
                newDateFinished=_iso(outcome.new_date_finished),
            )
        case Duplicate():
            payload.update(existingId=outcome.existing_id, existingTitle=outcome.existing_title)
        case NeedsReview():
            payload["reason"] = outcome.reason
            payload["metadata"] = row_to_payload(outcome.fallback)
        case Invalid():
            payload["reason"] = outcome.reason
    return payload


def report_to_payload(report: ResolutionReport) -> Payload:
    return {
        "total": report.total,
        "found": len(report.found),
        "notFound": len(report.not_found),
        "duplicates": len(report.duplicates),
        "libraryUpdates": len(report.library_updates),
        "invalid": len(report.invalid),
        "skippedShelves": report.skipped_shelves,
        "results": [outcome_to_payload(outcome) for outcome in report.results],
    }


def commit_result_to_payload(result: CommitResult) -> Payload:
    return {
        "message": result.message,
        "imported": result.imported,
        "updated": result.updated,
        "addedToLibrary": result.added_to_library,
        "failed": result.failed,
        "errors": list(result.errors),
    }


def entry_to_payload(entry: UnifiedEntry) -> Payload:
    return {
        "id": format_unified_id(entry.entry_id),
        "source": str(entry.source),
        "title": entry.title,
        "author": entry.author,
        "isbn": entry.isbn,
        "page_count": entry.page_count,
        "genre": entry.genre,
        "synopsis": entry.synopsis,
        "tags": list(entry.tags),
        "series_name": entry.series_name,
        "series_position": entry.series_position,
        "date_finished": _iso(entry.date_finished),
        "owned": entry.owned,
        "created_at": _iso(entry.created_at),
        "updated_at": _iso(entry.updated_at),
    }


def rating_to_payload(rating: Rating) -> Payload:
    return {
        "rating": rating.rating,
        "comment": rating.comment,
        "created_at": _iso(rating.created_at),
        "updated_at": _iso(rating.updated_at),
    }
