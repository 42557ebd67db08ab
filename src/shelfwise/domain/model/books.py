"""Book records: library copies, completed-only reads and their ratings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from shelfwise.domain.model.enums import ReadingStatus

if TYPE_CHECKING:
    from datetime import date


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class BookRecord:
    """Descriptive attributes shared by library and completed books."""

    user_id: int
    title: str
    author: str | None = None
    isbn: str | None = None
    page_count: int | None = None
    genre: str | None = None
    synopsis: str | None = None
    tags: list[str] = field(default_factory=list[str])
    series_name: str | None = None
    series_position: float | None = None
    date_finished: date | None = None

    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()


@dataclass(eq=False, kw_only=True)
class LibraryBook(BookRecord):
    """A book the user owns or tracks in their library.

    At most one row exists per (user, isbn) when the isbn is set.
    """

    reading_status: ReadingStatus = ReadingStatus.UNREAD

    @property
    def is_read(self) -> bool:
        return self.reading_status is ReadingStatus.READ

    def mark_read(self, date_finished: date | None) -> None:
        self.reading_status = ReadingStatus.READ
        self.date_finished = date_finished
        self.touch()

    def mark_unread(self) -> None:
        self.reading_status = ReadingStatus.UNREAD
        self.date_finished = None
        self.touch()


@dataclass(eq=False, kw_only=True)
class CompletedBook(BookRecord):
    """A finished book that is not necessarily part of the library."""

    owned: bool = False

    def to_library_book(self) -> LibraryBook:
        """Copy every descriptive field into a new, read library book."""

        return LibraryBook(
            user_id=self.user_id,
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            page_count=self.page_count,
            genre=self.genre,
            synopsis=self.synopsis,
            tags=list(self.tags),
            series_name=self.series_name,
            series_position=self.series_position,
            date_finished=self.date_finished,
            reading_status=ReadingStatus.READ,
        )


MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 5000


@dataclass(eq=False, kw_only=True)
class Rating:
    """A 1..5 rating a user gave a book, with an optional comment."""

    book_id: int
    user_id: int
    rating: int
    comment: str | None = None

    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def revise(self, rating: int, comment: str | None) -> None:
        self.rating = rating
        self.comment = comment
        self.updated_at = utcnow()


@dataclass(eq=False, kw_only=True)
class LibraryRating(Rating):
    pass


@dataclass(eq=False, kw_only=True)
class CompletedRating(Rating):
    pass
