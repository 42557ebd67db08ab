from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shelfwise.adapters.sqlalchemy import (
    SqlAlchemyCompletedBookRepository,
    SqlAlchemyLibraryBookRepository,
)
from shelfwise.domain.importing import ImportCommitRequest, commit_import
from shelfwise.domain.model import CompletedEntryId, CompletedRating
from shelfwise.domain.promotion import promote_entry
from tests.helpers.books import USER_ID, make_completed_book, make_row

if TYPE_CHECKING:
    from collections.abc import Callable

    from shelfwise.adapters.sqlalchemy import SqlAlchemyUnitOfWork

type UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


def _fail(_repository: object, _entity: object) -> None:
    raise RuntimeError("disk full")


def test_failed_promotion_leaves_both_tables_untouched(
    sqlite_unit_of_work: UnitOfWorkFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.completed_books.add(make_completed_book("Dune", isbn="9780441172719"))
        uow.repositories.completed_ratings.add(
            CompletedRating(book_id=1, user_id=USER_ID, rating=4, comment="spice")
        )
        uow.commit()
    monkeypatch.setattr(SqlAlchemyCompletedBookRepository, "remove", _fail)

    with pytest.raises(RuntimeError, match="disk full"):
        promote_entry(
            CompletedEntryId(1), user_id=USER_ID, unit_of_work_factory=sqlite_unit_of_work
        )

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        assert repositories.library_books.list_for_user(USER_ID) == []
        assert repositories.library_ratings.get(1, USER_ID) is None
        (survivor,) = repositories.completed_books.list_for_user(USER_ID)
        assert survivor.title == "Dune"
        rating = repositories.completed_ratings.get(1, USER_ID)
        assert rating is not None
        assert rating.comment == "spice"


def test_owned_row_is_not_half_imported(
    sqlite_unit_of_work: UnitOfWorkFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(SqlAlchemyLibraryBookRepository, "add", _fail)
    request = ImportCommitRequest(
        books_to_import=(
            make_row("Dune", isbn="9780441172719", owned_flag=True),
            make_row("Emma", "Jane Austen"),
        )
    )

    result = commit_import(request, user_id=USER_ID, unit_of_work_factory=sqlite_unit_of_work)

    assert result.imported == 1
    assert result.failed == 1
    assert result.errors == ['Failed to import "Dune": disk full']
    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        titles = [book.title for book in repositories.completed_books.list_for_user(USER_ID)]
        assert titles == ["Emma"]
        assert repositories.library_books.list_for_user(USER_ID) == []
