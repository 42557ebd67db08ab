"""Per-entry operations addressed by unified id: read, edit, remove, rate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from shelfwise.domain.errors import EntryNotFoundError, ImportValidationError
from shelfwise.domain.importing.commit import completed_book_from_row
from shelfwise.domain.importing.normalize import (
    clean_isbn,
    parse_date,
    parse_flag,
    parse_page_count,
    parse_series_position,
    parse_tags,
)
from shelfwise.domain.model import (
    MAX_COMMENT_LENGTH,
    MAX_RATING,
    MIN_RATING,
    CompletedEntryId,
    CompletedRating,
    LibraryEntryId,
    LibraryRating,
    UnifiedEntry,
)
from shelfwise.domain.unified_view import compose_unified_view

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from shelfwise.domain.importing.rows import NormalizedImportRow
    from shelfwise.domain.model import CompletedBook, LibraryBook, Rating, UnifiedId
    from shelfwise.domain.ports import BookRepositories, BookUnitOfWork
    from shelfwise.domain.ports.persistence import (
        CompletedRatingRepository,
        LibraryRatingRepository,
    )

    type UnitOfWorkFactory = Callable[[], BookUnitOfWork]

log = logging.getLogger(__name__)

EDITABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "title",
        "author",
        "isbn",
        "page_count",
        "genre",
        "synopsis",
        "tags",
        "series_name",
        "series_position",
        "date_finished",
    }
)
COMPLETED_ONLY_FIELDS: Final[frozenset[str]] = frozenset({"owned"})


def list_unified(*, user_id: int, unit_of_work_factory: UnitOfWorkFactory) -> list[UnifiedEntry]:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        return compose_unified_view(
            repositories.library_books.list_read(user_id),
            repositories.completed_books.list_for_user(user_id),
        )


def get_entry(
    entry_id: UnifiedId,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UnifiedEntry:
    with unit_of_work_factory() as uow:
        return UnifiedEntry.project(_load(uow.repositories, entry_id, user_id=user_id))


def update_entry(
    entry_id: UnifiedId,
    changes: Mapping[str, object],
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UnifiedEntry:
    allowed = EDITABLE_FIELDS | (
        COMPLETED_ONLY_FIELDS if isinstance(entry_id, CompletedEntryId) else frozenset()
    )
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ImportValidationError(f"Cannot update field(s): {', '.join(unknown)}")

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        book = _load(repositories, entry_id, user_id=user_id)
        coerced = {name: _coerce_field(name, raw) for name, raw in changes.items()}

        # checked before any attribute changes so no pending update is flushed
        new_isbn = coerced.get("isbn")
        if isinstance(entry_id, LibraryEntryId) and isinstance(new_isbn, str):
            clash = repositories.library_books.get_by_isbn(user_id, new_isbn)
            if clash is not None and clash is not book:
                raise ImportValidationError(f"Another library book already has ISBN {new_isbn}")

        for name, value in coerced.items():
            setattr(book, name, value)
        book.touch()
        uow.commit()
        return UnifiedEntry.project(book)


def remove_entry(
    entry_id: UnifiedId,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> None:
    """Library entries are marked unread; completed entries are deleted with their rating."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        match entry_id:
            case LibraryEntryId(id=book_id):
                _load_library(repositories, book_id, user_id=user_id).mark_unread()
            case CompletedEntryId(id=book_id):
                completed = _load_completed(repositories, book_id, user_id=user_id)
                rating = repositories.completed_ratings.get(book_id, user_id)
                if rating is not None:
                    repositories.completed_ratings.remove(rating)
                repositories.completed_books.remove(completed)
        uow.commit()
    log.info("Removed entry %s for user %s", entry_id, user_id)


def add_completed_book(
    row: NormalizedImportRow,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> UnifiedEntry:
    if not row.has_title:
        raise ImportValidationError("Title is required")
    with unit_of_work_factory() as uow:
        book = completed_book_from_row(row, user_id=user_id)
        uow.repositories.completed_books.add(book)
        uow.commit()
        return UnifiedEntry.project(book)


def get_rating(
    entry_id: UnifiedId,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> Rating | None:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        _load(repositories, entry_id, user_id=user_id)
        return _rating_store(repositories, entry_id).get(entry_id.id, user_id)


def save_rating(
    entry_id: UnifiedId,
    rating: int,
    comment: str | None = None,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> tuple[Rating, bool]:
    """Insert or revise the user's rating; returns the rating and whether it is new."""

    validate_rating(rating, comment)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        _load(repositories, entry_id, user_id=user_id)
        store = _rating_store(repositories, entry_id)
        existing = store.get(entry_id.id, user_id)
        if existing is not None:
            existing.revise(rating, comment)
            uow.commit()
            return existing, False

        created: Rating
        if isinstance(entry_id, LibraryEntryId):
            created = LibraryRating(
                book_id=entry_id.id, user_id=user_id, rating=rating, comment=comment
            )
        else:
            created = CompletedRating(
                book_id=entry_id.id, user_id=user_id, rating=rating, comment=comment
            )
        store.add(created)  # type: ignore[arg-type]
        uow.commit()
        return created, True


def delete_rating(
    entry_id: UnifiedId,
    *,
    user_id: int,
    unit_of_work_factory: UnitOfWorkFactory,
) -> bool:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        _load(repositories, entry_id, user_id=user_id)
        store = _rating_store(repositories, entry_id)
        existing = store.get(entry_id.id, user_id)
        if existing is None:
            return False
        store.remove(existing)  # type: ignore[arg-type]
        uow.commit()
        return True


def list_series(*, user_id: int, unit_of_work_factory: UnitOfWorkFactory) -> list[str]:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        names = repositories.library_books.read_series_names(user_id)
        names |= repositories.completed_books.series_names(user_id)
    return sorted(names)


def validate_rating(rating: object, comment: str | None) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ImportValidationError("Rating must be an integer")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ImportValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    if comment is not None and len(comment) > MAX_COMMENT_LENGTH:
        raise ImportValidationError(f"Comment must be at most {MAX_COMMENT_LENGTH} characters")


def _load(
    repositories: BookRepositories,
    entry_id: UnifiedId,
    *,
    user_id: int,
) -> LibraryBook | CompletedBook:
    if isinstance(entry_id, LibraryEntryId):
        return _load_library(repositories, entry_id.id, user_id=user_id)
    return _load_completed(repositories, entry_id.id, user_id=user_id)


def _load_library(repositories: BookRepositories, book_id: int, *, user_id: int) -> LibraryBook:
    book = repositories.library_books.get(user_id, book_id)
    if book is None or not book.is_read:
        raise EntryNotFoundError(f"Library book {book_id} is not a finished book")
    return book


def _load_completed(
    repositories: BookRepositories,
    book_id: int,
    *,
    user_id: int,
) -> CompletedBook:
    book = repositories.completed_books.get(user_id, book_id)
    if book is None:
        raise EntryNotFoundError(f"Completed book {book_id} not found")
    return book


def _rating_store(
    repositories: BookRepositories,
    entry_id: UnifiedId,
) -> LibraryRatingRepository | CompletedRatingRepository:
    if isinstance(entry_id, LibraryEntryId):
        return repositories.library_ratings
    return repositories.completed_ratings


def _coerce_field(name: str, value: object) -> object:
    match name:
        case "title":
            if not isinstance(value, str) or not value.strip():
                raise ImportValidationError("Title cannot be empty")
            return value.strip()
        case "isbn":
            return clean_isbn(value)
        case "page_count":
            return parse_page_count(value)
        case "series_position":
            return parse_series_position(value)
        case "tags":
            return list(parse_tags(value))
        case "owned":
            return parse_flag(value)
        case "date_finished":
            if value is None or value == "":
                return None
            parsed = parse_date(value)
            if parsed is None:
                raise ImportValidationError(f"Invalid date: {value!r}")
            return parsed
        case _:
            if value is None:
                return None
            text = str(value).strip()
            return text or None

