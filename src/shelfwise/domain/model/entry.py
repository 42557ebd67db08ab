"""Read-only projection of a finished book, whichever table it lives in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shelfwise.domain.model.books import LibraryBook
from shelfwise.domain.model.identity import CompletedEntryId, LibraryEntryId, UnifiedId

if TYPE_CHECKING:
    from datetime import date, datetime

    from shelfwise.domain.model.books import CompletedBook
    from shelfwise.domain.model.enums import EntrySource


@dataclass(frozen=True, slots=True, kw_only=True)
class UnifiedEntry:
    entry_id: UnifiedId
    title: str
    author: str | None
    isbn: str | None
    page_count: int | None
    genre: str | None
    synopsis: str | None
    tags: tuple[str, ...]
    series_name: str | None
    series_position: float | None
    date_finished: date | None
    owned: bool
    created_at: datetime
    updated_at: datetime

    @property
    def source(self) -> EntrySource:
        return self.entry_id.SOURCE

    @classmethod
    def project(cls, book: LibraryBook | CompletedBook) -> UnifiedEntry:
        """Project a stored row; library rows are always owned."""

        if book.id is None:
            raise ValueError("Cannot project an unsaved book")
        if isinstance(book, LibraryBook):
            entry_id: UnifiedId = LibraryEntryId(book.id)
            owned = True
        else:
            entry_id = CompletedEntryId(book.id)
            owned = book.owned
        return cls(
            entry_id=entry_id,
            title=book.title,
            author=book.author,
            isbn=book.isbn,
            page_count=book.page_count,
            genre=book.genre,
            synopsis=book.synopsis,
            tags=tuple(book.tags),
            series_name=book.series_name,
            series_position=book.series_position,
            date_finished=book.date_finished,
            owned=owned,
            created_at=book.created_at,
            updated_at=book.updated_at,
        )
