"""Classification of normalized rows against persisted state and the provider."""

from __future__ import annotations

import threading
from datetime import date

from shelfwise.domain.importing import (
    Duplicate,
    Found,
    Invalid,
    LibraryUpdate,
    NeedsReview,
    NormalizedBatch,
    NormalizedImportRow,
    ResolutionReport,
    resolve_import,
)
from shelfwise.domain.model import BookMetadata, ImportDialect, ReadingStatus
from tests.helpers.books import (
    OTHER_USER_ID,
    USER_ID,
    FakeBookStore,
    make_completed_book,
    make_library_book,
    make_row,
)
from tests.helpers.lookup import FakeLookupProvider

DUNE_ISBN = "9780441172716"


def _resolve(
    store: FakeBookStore,
    provider: FakeLookupProvider,
    *rows: NormalizedImportRow,
    skipped: int = 0,
    timeout: float | None = None,
    max_workers: int = 4,
) -> ResolutionReport:
    batch = NormalizedBatch(rows=rows, skipped_shelves=skipped, dialect=ImportDialect.GENERIC)
    return resolve_import(
        batch,
        user_id=USER_ID,
        unit_of_work_factory=store.unit_of_work,
        provider=provider,
        max_workers=max_workers,
        timeout=timeout,
    )


def test_isbn_already_completed_is_duplicate(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    store.seed(make_completed_book("Dune", "Frank Herbert", isbn=DUNE_ISBN))

    report = _resolve(store, provider, make_row("Dune", "Frank Herbert", isbn=DUNE_ISBN))

    (outcome,) = report.results
    assert isinstance(outcome, Duplicate)
    assert outcome.existing_id == 1
    assert outcome.existing_title == "Dune"
    assert provider.search_calls == []


def test_title_author_match_is_duplicate_across_editions(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    store.seed(make_completed_book("Dune", "Frank Herbert", isbn="0441172717"))

    report = _resolve(store, provider, make_row("DUNE", "frank herbert", isbn=DUNE_ISBN))

    assert isinstance(report.results[0], Duplicate)


def test_isbn_in_library_is_library_update(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    store.seed(make_library_book("Dune", None, isbn=DUNE_ISBN, status=ReadingStatus.UNREAD))
    row = make_row("Dune", None, isbn=DUNE_ISBN, date_finished=date(2024, 3, 1))

    report = _resolve(store, provider, row)

    (outcome,) = report.results
    assert isinstance(outcome, LibraryUpdate)
    assert outcome.library_book_id == 1
    assert outcome.current_status is ReadingStatus.UNREAD
    assert outcome.current_date_finished is None
    assert outcome.new_date_finished == date(2024, 3, 1)
    assert provider.isbn_calls == []


def test_search_without_isbn_needs_review(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    report = _resolve(store, provider, make_row("Obscure Title", "Unknown Author"))

    (outcome,) = report.results
    assert isinstance(outcome, NeedsReview)
    assert outcome.reason == "No match found"
    assert outcome.fallback.title == "Obscure Title"
    assert provider.search_calls == [("Obscure Title", "Unknown Author", None)]


def test_search_hit_is_enriched_by_isbn_lookup(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    provider.by_title["Dune"] = BookMetadata(title="Dune", author="Frank Herbert", isbn="111")
    provider.by_isbn["111"] = BookMetadata(
        title="Dune",
        author="Frank Herbert",
        isbn="111",
        page_count=412,
        synopsis="Spice.",
        tags=("sci-fi",),
    )
    row = make_row("Dune", "Frank Herbert", date_finished=date(2024, 3, 1), owned_flag=True)

    report = _resolve(store, provider, row)

    (outcome,) = report.results
    assert isinstance(outcome, Found)
    assert outcome.metadata.isbn == "111"
    assert outcome.metadata.page_count == 412
    assert outcome.metadata.tags == ("sci-fi",)
    assert outcome.metadata.date_finished == date(2024, 3, 1)
    assert outcome.metadata.owned is True
    assert provider.isbn_calls == ["111"]


def test_isbn_found_by_search_is_rechecked_against_persisted_rows(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    store.seed(
        make_completed_book("The Hobbit", "J.R.R. Tolkien", isbn="222"),
        make_library_book("Emma", "Jane Austen", isbn="333", status=ReadingStatus.READING),
    )
    provider.by_title["Hobbit"] = BookMetadata(title="The Hobbit", isbn="222")
    provider.by_title["Emma (Penguin)"] = BookMetadata(title="Emma", isbn="333")

    report = _resolve(
        store,
        provider,
        make_row("Hobbit", "Tolkien"),
        make_row("Emma (Penguin)", "Austen"),
    )

    hobbit, emma = report.results
    assert isinstance(hobbit, Duplicate)
    assert isinstance(emma, LibraryUpdate)
    assert emma.current_status is ReadingStatus.READING
    assert provider.isbn_calls == []


def test_isbn_only_row_uses_isbn_lookup(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    provider.by_isbn["444"] = BookMetadata(title="Beloved", author="Toni Morrison", isbn="444")

    report = _resolve(
        store,
        provider,
        make_row("Beloved", None, isbn="444"),
        make_row("Unknown", None, isbn="555"),
    )

    found, missing = report.results
    assert isinstance(found, Found)
    assert found.metadata.author == "Toni Morrison"
    assert isinstance(missing, NeedsReview)


def test_rows_without_title_or_lookup_keys(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    report = _resolve(store, provider, make_row("", "Someone"), make_row("Loose Title", None))

    invalid, loose = report.results
    assert isinstance(invalid, Invalid)
    assert invalid.reason == "Missing title"
    assert isinstance(loose, NeedsReview)
    assert provider.search_calls == []
    assert provider.isbn_calls == []


def test_provider_errors_degrade_to_needs_review(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    provider.by_title["Dune"] = RuntimeError("service unavailable")

    report = _resolve(store, provider, make_row("Dune", "Frank Herbert"))

    (outcome,) = report.results
    assert isinstance(outcome, NeedsReview)
    assert outcome.reason == "Lookup failed: service unavailable"


def test_failed_isbn_lookup_falls_back_to_search_result(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    provider.by_title["Dune"] = BookMetadata(title="Dune", author="Frank Herbert", isbn="111")
    provider.by_isbn["111"] = TimeoutError("slow")

    report = _resolve(store, provider, make_row("Dune", "Frank Herbert"))

    (outcome,) = report.results
    assert isinstance(outcome, Found)
    assert outcome.metadata.isbn == "111"


def test_timed_out_lookup_needs_review(store: FakeBookStore, provider: FakeLookupProvider) -> None:
    provider.block = threading.Event()
    try:
        report = _resolve(store, provider, make_row("Dune", "Frank Herbert"), timeout=0.05)
    finally:
        provider.block.set()

    (outcome,) = report.results
    assert isinstance(outcome, NeedsReview)
    assert outcome.reason == "Lookup timed out"


def test_only_the_importing_users_books_count(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    store.seed(make_completed_book("Dune", "Frank Herbert", user_id=OTHER_USER_ID))

    report = _resolve(store, provider, make_row("Dune", "Frank Herbert"))

    assert isinstance(report.results[0], NeedsReview)


def test_classification_is_deterministic_and_in_input_order(
    store: FakeBookStore, provider: FakeLookupProvider
) -> None:
    store.seed(make_completed_book("Dune", "Frank Herbert"))
    for number in range(8):
        provider.by_title[f"Book {number}"] = BookMetadata(
            title=f"Book {number}", isbn=f"9{number}" if number % 2 else None
        )
    rows = [make_row(f"Book {number}", "Author") for number in range(8)]
    rows.insert(3, make_row("Dune", "Frank Herbert"))

    first = _resolve(store, provider, *rows)
    second = _resolve(store, provider, *rows, max_workers=1)

    assert [item.index for item in first.results] == list(range(9))
    assert [item.kind for item in first.results] == [item.kind for item in second.results]
    assert first.results[3].kind == "duplicate"


def test_report_counts(store: FakeBookStore, provider: FakeLookupProvider) -> None:
    store.seed(make_completed_book("Dune", "Frank Herbert"))

    report = _resolve(
        store,
        provider,
        make_row("Dune", "Frank Herbert"),
        make_row("", None),
        make_row("Obscure", "Nobody"),
        skipped=4,
    )

    assert report.counts() == {
        "total": 3,
        "found": 0,
        "not_found": 1,
        "duplicates": 1,
        "library_updates": 0,
        "invalid": 1,
        "skipped_shelves": 4,
    }
