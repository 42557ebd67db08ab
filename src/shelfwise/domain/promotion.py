"""Promotion of a completed-only book into the library ("add to library")."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from shelfwise.domain.dedup import compute_keys
from shelfwise.domain.errors import EntryNotFoundError, PromotionInvariantViolation
from shelfwise.domain.model import LibraryEntryId, LibraryRating

if TYPE_CHECKING:
    from collections.abc import Callable

    from shelfwise.domain.model import CompletedBook, LibraryBook, UnifiedId
    from shelfwise.domain.ports import BookRepositories, BookUnitOfWork, LibraryBookRepository

log = logging.getLogger(__name__)

ALREADY_IN_LIBRARY: Final[str] = "Book is already in your library"
MERGED_MESSAGE: Final[str] = "Book already exists in library, merged and updated"
CREATED_MESSAGE: Final[str] = "Book added to library"


@dataclass(frozen=True, slots=True)
class PromotionResult:
    library_book_id: int
    merged: bool
    rating_migrated: bool = False

    @property
    def message(self) -> str:
        return MERGED_MESSAGE if self.merged else CREATED_MESSAGE


def promote_entry(
    entry_id: UnifiedId,
    *,
    user_id: int,
    unit_of_work_factory: Callable[[], BookUnitOfWork],
) -> PromotionResult:
    """Move a completed book into the library in a single unit of work.

    An existing library book sharing a dedup key is reused (marked read, its
    own completion date kept when set); otherwise a read copy is created. The
    rating moves along unless the library book already has one, and the
    completed row is deleted either way.
    """

    if isinstance(entry_id, LibraryEntryId):
        raise PromotionInvariantViolation(ALREADY_IN_LIBRARY)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        completed = repositories.completed_books.get(user_id, entry_id.id)
        if completed is None:
            raise EntryNotFoundError(f"Completed book {entry_id.id} not found")

        target = find_library_match(repositories.library_books, completed, user_id=user_id)
        merged = target is not None
        if target is None:
            target = completed.to_library_book()
            repositories.library_books.add(target)
        else:
            target.mark_read(target.date_finished or completed.date_finished)

        rating_migrated = _migrate_rating(repositories, completed, target, user_id=user_id)
        repositories.completed_books.remove(completed)
        uow.commit()

    if target.id is None:
        raise RuntimeError("Library book was not assigned an id")
    result = PromotionResult(
        library_book_id=target.id,
        merged=merged,
        rating_migrated=rating_migrated,
    )
    log.info(
        "Promoted completed book %s to library book %s (merged=%s)",
        entry_id.id,
        result.library_book_id,
        merged,
    )
    return result


def find_library_match(
    library_books: LibraryBookRepository,
    book: CompletedBook,
    *,
    user_id: int,
) -> LibraryBook | None:
    """Return the library book representing the same work, preferring an isbn match."""

    candidates = library_books.find_matching(user_id, compute_keys(book))
    if book.isbn:
        for candidate in candidates:
            if candidate.isbn == book.isbn:
                return candidate
    return candidates[0] if candidates else None


def _migrate_rating(
    repositories: BookRepositories,
    completed: CompletedBook,
    target: LibraryBook,
    *,
    user_id: int,
) -> bool:
    if completed.id is None or target.id is None:
        return False
    previous = repositories.completed_ratings.get(completed.id, user_id)
    if previous is None:
        return False

    migrated = False
    if repositories.library_ratings.get(target.id, user_id) is None:
        repositories.library_ratings.add(
            LibraryRating(
                book_id=target.id,
                user_id=user_id,
                rating=previous.rating,
                comment=previous.comment,
            )
        )
        migrated = True
    repositories.completed_ratings.remove(previous)
    return migrated
