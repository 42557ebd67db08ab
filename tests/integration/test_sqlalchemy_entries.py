from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shelfwise.domain import entries
from shelfwise.domain.errors import EntryNotFoundError, ImportValidationError
from shelfwise.domain.model import CompletedEntryId, LibraryBook, LibraryEntryId, ReadingStatus
from tests.helpers.books import USER_ID, make_completed_book, make_library_book

if TYPE_CHECKING:
    from collections.abc import Callable

    from shelfwise.adapters.sqlalchemy import SqlAlchemyUnitOfWork
    from shelfwise.domain.model import CompletedBook

type UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


def _seed(factory: UnitOfWorkFactory, *books: LibraryBook | CompletedBook) -> None:
    with factory() as uow:
        for book in books:
            if isinstance(book, LibraryBook):
                uow.repositories.library_books.add(book)
            else:
                uow.repositories.completed_books.add(book)
        uow.commit()


def test_isbn_clash_is_reported_before_the_update_is_flushed(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _seed(
        sqlite_unit_of_work,
        make_library_book("Dune", isbn="111"),
        make_library_book("Emma", "Jane Austen", isbn="222"),
    )

    with pytest.raises(ImportValidationError, match="already has ISBN 111"):
        entries.update_entry(
            LibraryEntryId(2),
            {"isbn": "111"},
            user_id=USER_ID,
            unit_of_work_factory=sqlite_unit_of_work,
        )

    with sqlite_unit_of_work() as uow:
        emma = uow.repositories.library_books.get(USER_ID, 2)
        assert emma is not None
        assert emma.isbn == "222"


def test_library_book_may_keep_or_change_its_isbn(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _seed(
        sqlite_unit_of_work,
        make_library_book("Dune", isbn="111"),
        make_library_book("Emma", "Jane Austen", isbn="222"),
    )

    kept = entries.update_entry(
        LibraryEntryId(1),
        {"isbn": "111", "genre": "Science Fiction"},
        user_id=USER_ID,
        unit_of_work_factory=sqlite_unit_of_work,
    )
    changed = entries.update_entry(
        LibraryEntryId(2),
        {"isbn": "333"},
        user_id=USER_ID,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert kept.genre == "Science Fiction"
    assert changed.isbn == "333"
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.library_books.get_by_isbn(USER_ID, "333") is not None


def test_series_come_from_finished_books_only(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _seed(
        sqlite_unit_of_work,
        make_library_book(
            "Shogun", "James Clavell", status=ReadingStatus.UNREAD, series_name="Asian Saga"
        ),
        make_library_book("Dune", series_name=" Dune Chronicles "),
        make_completed_book("The Hobbit", "J.R.R. Tolkien", series_name="Middle-earth"),
    )

    series = entries.list_series(user_id=USER_ID, unit_of_work_factory=sqlite_unit_of_work)

    assert series == ["Dune Chronicles", "Middle-earth"]


def test_delete_rating_of_missing_entry(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _seed(sqlite_unit_of_work, make_completed_book("Dune"))

    with pytest.raises(EntryNotFoundError, match="Completed book 5 not found"):
        entries.delete_rating(
            CompletedEntryId(5), user_id=USER_ID, unit_of_work_factory=sqlite_unit_of_work
        )
    assert (
        entries.delete_rating(
            CompletedEntryId(1), user_id=USER_ID, unit_of_work_factory=sqlite_unit_of_work
        )
        is False
    )
