"""Ports for persisting books and ratings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from shelfwise.domain.model import (
    CompletedBook,
    CompletedRating,
    LibraryBook,
    LibraryRating,
    Rating,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shelfwise.domain.dedup import DedupKey


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def remove(self, entity: TEntity) -> None: ...


@runtime_checkable
class BookRepository[TBook: (LibraryBook, CompletedBook)](Repository[TBook], Protocol):
    """Shared queries for both book tables; every query is scoped to one user."""

    def get(self, user_id: int, book_id: int) -> TBook | None: ...

    def list_for_user(self, user_id: int) -> list[TBook]:
        """Return the user's books ordered by id."""
        ...

    def find_matching(self, user_id: int, keys: Iterable[DedupKey]) -> list[TBook]:
        """Return the user's books sharing at least one dedup key, ordered by id."""
        ...

    def series_names(self, user_id: int) -> set[str]: ...


@runtime_checkable
class LibraryBookRepository(BookRepository[LibraryBook], Protocol):
    """Persistence contract for library books."""

    def list_read(self, user_id: int) -> list[LibraryBook]: ...

    def read_series_names(self, user_id: int) -> set[str]: ...
    def get_by_isbn(self, user_id: int, isbn: str) -> LibraryBook | None: ...


@runtime_checkable
class CompletedBookRepository(BookRepository[CompletedBook], Protocol):
    """Persistence contract for completed books."""


@runtime_checkable
class RatingRepository[TRating: Rating](Repository[TRating], Protocol):
    """One rating per (book, user)."""

    def get(self, book_id: int, user_id: int) -> TRating | None: ...


type LibraryRatingRepository = RatingRepository[LibraryRating]
type CompletedRatingRepository = RatingRepository[CompletedRating]
