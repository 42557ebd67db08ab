"""Best-effort application of operator-approved import classifications.

Every library update and every imported row runs in its own unit of work, so
one failing row never rolls back another. An owned row writes its completed
book and its library mirror in the same unit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shelfwise.domain.dedup import compute_keys
from shelfwise.domain.errors import CommitRaceConflict, EntryNotFoundError, ImportValidationError
from shelfwise.domain.model import CompletedBook

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from shelfwise.domain.importing.rows import NormalizedImportRow
    from shelfwise.domain.ports import BookRepositories, BookUnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LibraryUpdateRequest:
    library_book_id: int
    new_date_finished: date | None
    library_title: str | None = None


@dataclass(frozen=True, slots=True)
class ImportCommitRequest:
    books_to_import: tuple[NormalizedImportRow, ...] = ()
    library_updates: tuple[LibraryUpdateRequest, ...] = ()


@dataclass(slots=True)
class CommitResult:
    imported: int = 0
    updated: int = 0
    added_to_library: int = 0
    reused_library: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list[str])
    completed_ids: list[int] = field(default_factory=list[int])

    @property
    def message(self) -> str:
        parts = [
            f"{self.imported} books imported",
            f"{self.updated} library books updated",
        ]
        if self.added_to_library:
            parts.append(f"{self.added_to_library} added to library")
        parts.append(f"{self.failed} failed")
        return "Import complete: " + ", ".join(parts)


def commit_import(
    request: ImportCommitRequest,
    *,
    user_id: int,
    unit_of_work_factory: Callable[[], BookUnitOfWork],
) -> CommitResult:
    result = CommitResult()

    for update in request.library_updates:
        try:
            with unit_of_work_factory() as uow:
                _apply_library_update(uow.repositories, update, user_id=user_id)
                uow.commit()
        except EntryNotFoundError as exc:
            _record_failure(result, str(exc))
        except Exception as exc:  # noqa: BLE001 - one row must not stop the batch
            label = update.library_title or f"library book {update.library_book_id}"
            _record_failure(result, f'Failed to update "{label}": {exc}')
        else:
            result.updated += 1

    for position, row in enumerate(request.books_to_import, start=1):
        try:
            if not row.has_title:
                msg = f"Skipped row {position}: missing title"
                raise ImportValidationError(msg)  # noqa: TRY301
            with unit_of_work_factory() as uow:
                completed, mirrored, reused = _import_row(uow.repositories, row, user_id=user_id)
                uow.commit()
        except (CommitRaceConflict, ImportValidationError) as exc:
            _record_failure(result, str(exc))
        except Exception as exc:  # noqa: BLE001 - one row must not stop the batch
            _record_failure(result, f'Failed to import "{row.title}": {exc}')
        else:
            result.imported += 1
            if completed.id is not None:
                result.completed_ids.append(completed.id)
            if mirrored:
                result.added_to_library += 1
            if reused:
                result.reused_library += 1

    log.info(result.message)
    return result


def _apply_library_update(
    repositories: BookRepositories,
    update: LibraryUpdateRequest,
    *,
    user_id: int,
) -> None:
    book = repositories.library_books.get(user_id, update.library_book_id)
    if book is None:
        raise EntryNotFoundError(f"Library book {update.library_book_id} not found")
    book.mark_read(update.new_date_finished)


def _import_row(
    repositories: BookRepositories,
    row: NormalizedImportRow,
    *,
    user_id: int,
) -> tuple[CompletedBook, bool, bool]:
    keys = compute_keys(row)
    if repositories.completed_books.find_matching(user_id, keys):
        raise CommitRaceConflict(f'Skipped "{row.title}": already in completed books')

    completed = completed_book_from_row(row, user_id=user_id)
    repositories.completed_books.add(completed)

    mirrored = reused = False
    if row.owned:
        if repositories.library_books.find_matching(user_id, keys):
            reused = True
        else:
            repositories.library_books.add(completed.to_library_book())
            mirrored = True
    return completed, mirrored, reused


def completed_book_from_row(row: NormalizedImportRow, *, user_id: int) -> CompletedBook:
    return CompletedBook(
        user_id=user_id,
        title=row.title.strip(),
        author=row.author,
        isbn=row.isbn,
        page_count=row.page_count,
        genre=row.genre,
        synopsis=row.synopsis,
        tags=list(row.tags),
        series_name=row.series_name,
        series_position=row.series_position,
        date_finished=row.date_finished,
        owned=row.owned,
    )


def _record_failure(result: CommitResult, message: str) -> None:
    log.warning("Import row failed: %s", message)
    result.failed += 1
    result.errors.append(message)
