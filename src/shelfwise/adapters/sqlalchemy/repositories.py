"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from shelfwise.adapters.sqlalchemy.mappings import (
    completed_book_table,
    completed_rating_table,
    library_book_table,
    library_rating_table,
)
from shelfwise.domain.dedup import compute_keys
from shelfwise.domain.model import (
    CompletedBook,
    CompletedRating,
    LibraryBook,
    LibraryRating,
    ReadingStatus,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Select, Table
    from sqlalchemy.orm import Session

    from shelfwise.domain.dedup import DedupKey


class SqlAlchemyBookRepository[TBook: (LibraryBook, CompletedBook)]:
    """Shared queries over one of the two book tables.

    ``add`` and ``remove`` flush immediately so generated ids are available and
    statements reach the database in the order the domain issued them.
    """

    def __init__(self, session: Session, book_cls: type[TBook], table: Table) -> None:
        self.session = session
        self._book_cls = book_cls
        self._table = table

    def add(self, entity: TBook) -> None:
        self.session.add(entity)
        self.session.flush()

    def remove(self, entity: TBook) -> None:
        self.session.delete(entity)
        self.session.flush()

    def get(self, user_id: int, book_id: int) -> TBook | None:
        stmt = (
            select(self._book_cls)
            .where(self._table.c.id == book_id)
            .where(self._table.c.user_id == user_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: int) -> list[TBook]:
        stmt = (
            select(self._book_cls)
            .where(self._table.c.user_id == user_id)
            .order_by(self._table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def find_matching(self, user_id: int, keys: Iterable[DedupKey]) -> list[TBook]:
        # title+author keys are case-folded in Python, so candidates are filtered here
        wanted = set(keys)
        if not wanted:
            return []
        return [
            book
            for book in self.list_for_user(user_id)
            if not wanted.isdisjoint(compute_keys(book))
        ]

    def series_names(self, user_id: int) -> set[str]:
        return self._distinct_series(self._series_query(user_id))

    def _series_query(self, user_id: int) -> Select[tuple[str | None]]:
        return (
            select(self._table.c.series_name)
            .where(self._table.c.user_id == user_id)
            .where(self._table.c.series_name.is_not(None))
            .distinct()
        )

    def _distinct_series(self, stmt: Select[tuple[str | None]]) -> set[str]:
        names = self.session.execute(stmt).scalars()
        return {name.strip() for name in names if name and name.strip()}


class SqlAlchemyLibraryBookRepository(SqlAlchemyBookRepository[LibraryBook]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, LibraryBook, library_book_table)

    def list_read(self, user_id: int) -> list[LibraryBook]:
        stmt = (
            select(LibraryBook)
            .where(library_book_table.c.user_id == user_id)
            .where(library_book_table.c.reading_status == ReadingStatus.READ)
            .order_by(library_book_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def read_series_names(self, user_id: int) -> set[str]:
        return self._distinct_series(
            self._series_query(user_id).where(
                library_book_table.c.reading_status == ReadingStatus.READ
            )
        )

    def get_by_isbn(self, user_id: int, isbn: str) -> LibraryBook | None:
        stmt = (
            select(LibraryBook)
            .where(library_book_table.c.user_id == user_id)
            .where(library_book_table.c.isbn == isbn)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyCompletedBookRepository(SqlAlchemyBookRepository[CompletedBook]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, CompletedBook, completed_book_table)


class SqlAlchemyRatingRepository[TRating: (LibraryRating, CompletedRating)]:
    def __init__(self, session: Session, rating_cls: type[TRating], table: Table) -> None:
        self.session = session
        self._rating_cls = rating_cls
        self._table = table

    def add(self, entity: TRating) -> None:
        self.session.add(entity)
        self.session.flush()

    def remove(self, entity: TRating) -> None:
        self.session.delete(entity)
        self.session.flush()

    def get(self, book_id: int, user_id: int) -> TRating | None:
        stmt = (
            select(self._rating_cls)
            .where(self._table.c.book_id == book_id)
            .where(self._table.c.user_id == user_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


def library_rating_repository(session: Session) -> SqlAlchemyRatingRepository[LibraryRating]:
    return SqlAlchemyRatingRepository(session, LibraryRating, library_rating_table)


def completed_rating_repository(session: Session) -> SqlAlchemyRatingRepository[CompletedRating]:
    return SqlAlchemyRatingRepository(session, CompletedRating, completed_rating_table)

