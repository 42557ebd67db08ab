"""Read-only classification of normalized import rows.

Each row is evaluated independently, in this order:

1. no title                                      -> ``Invalid``
2. shares a dedup key with a stored completed book -> ``Duplicate``
3. its isbn belongs to a stored library book       -> ``LibraryUpdate``
4. external resolution through the lookup provider -> ``Found`` (after
   re-running 2 and 3 against an isbn the search surfaced)
5. anything else                                 -> ``NeedsReview``

Rows are only compared with persisted state, never with siblings in the same
batch. Lookups may run on a small thread pool; results are collected in input
order so the report does not depend on completion order.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final, Literal

from shelfwise.domain.dedup import compute_keys, isbn_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import date

    from shelfwise.domain.importing.rows import NormalizedBatch, NormalizedImportRow
    from shelfwise.domain.model import BookMetadata, CompletedBook, LibraryBook, ReadingStatus
    from shelfwise.domain.ports import BookUnitOfWork, LookupProvider

log = logging.getLogger(__name__)

MAX_LOOKUP_WORKERS: Final[int] = 4
MISSING_TITLE: Final[str] = "Missing title"
NO_MATCH: Final[str] = "No match found"
LOOKUP_TIMED_OUT: Final[str] = "Lookup timed out"


@dataclass(frozen=True, slots=True, kw_only=True)
class Found:
    index: int
    row: NormalizedImportRow
    metadata: NormalizedImportRow
    kind: Literal["found"] = "found"


@dataclass(frozen=True, slots=True, kw_only=True)
class LibraryUpdate:
    index: int
    row: NormalizedImportRow
    library_book_id: int
    library_title: str
    current_status: ReadingStatus
    current_date_finished: date | None
    new_date_finished: date | None
    kind: Literal["library_update"] = "library_update"


@dataclass(frozen=True, slots=True, kw_only=True)
class Duplicate:
    index: int
    row: NormalizedImportRow
    existing_id: int
    existing_title: str
    kind: Literal["duplicate"] = "duplicate"


@dataclass(frozen=True, slots=True, kw_only=True)
class NeedsReview:
    index: int
    row: NormalizedImportRow
    reason: str
    kind: Literal["needs_review"] = "needs_review"

    @property
    def fallback(self) -> NormalizedImportRow:
        return self.row


@dataclass(frozen=True, slots=True, kw_only=True)
class Invalid:
    index: int
    row: NormalizedImportRow
    reason: str = MISSING_TITLE
    kind: Literal["invalid"] = "invalid"


type ResolutionOutcome = Found | LibraryUpdate | Duplicate | NeedsReview | Invalid


@dataclass(frozen=True, slots=True)
class ResolutionReport:
    results: tuple[ResolutionOutcome, ...]
    skipped_shelves: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def found(self) -> tuple[Found, ...]:
        return tuple(item for item in self.results if isinstance(item, Found))

    @property
    def not_found(self) -> tuple[NeedsReview, ...]:
        return tuple(item for item in self.results if isinstance(item, NeedsReview))

    @property
    def duplicates(self) -> tuple[Duplicate, ...]:
        return tuple(item for item in self.results if isinstance(item, Duplicate))

    @property
    def library_updates(self) -> tuple[LibraryUpdate, ...]:
        return tuple(item for item in self.results if isinstance(item, LibraryUpdate))

    @property
    def invalid(self) -> tuple[Invalid, ...]:
        return tuple(item for item in self.results if isinstance(item, Invalid))

    def counts(self) -> dict[str, int]:
        return {
            "total": self.total,
            "found": len(self.found),
            "not_found": len(self.not_found),
            "duplicates": len(self.duplicates),
            "library_updates": len(self.library_updates),
            "invalid": len(self.invalid),
            "skipped_shelves": self.skipped_shelves,
        }


@dataclass(frozen=True, slots=True)
class _LibraryTarget:
    id: int
    title: str
    status: ReadingStatus
    date_finished: date | None


@dataclass(slots=True)
class PersistedState:
    """Snapshot of one user's books, taken once per batch."""

    completed_by_key: dict[str, tuple[int, str]] = field(default_factory=dict)
    library_by_isbn: dict[str, _LibraryTarget] = field(default_factory=dict)

    @classmethod
    def capture(
        cls,
        completed: Iterable[CompletedBook],
        library: Iterable[LibraryBook],
    ) -> PersistedState:
        state = cls()
        for book in completed:
            if book.id is None:
                continue
            for key in compute_keys(book):
                state.completed_by_key.setdefault(key, (book.id, book.title))
        for book in library:
            if book.id is None or not book.isbn:
                continue
            state.library_by_isbn.setdefault(
                book.isbn,
                _LibraryTarget(book.id, book.title, book.reading_status, book.date_finished),
            )
        return state

    def duplicate_of(self, keys: Iterable[str]) -> tuple[int, str] | None:
        for key in keys:
            existing = self.completed_by_key.get(key)
            if existing is not None:
                return existing
        return None

    def library_target(self, isbn: str | None) -> _LibraryTarget | None:
        if not isbn:
            return None
        return self.library_by_isbn.get(isbn)


def resolve_import(
    batch: NormalizedBatch,
    *,
    user_id: int,
    unit_of_work_factory: Callable[[], BookUnitOfWork],
    provider: LookupProvider,
    max_workers: int = MAX_LOOKUP_WORKERS,
    timeout: float | None = None,
) -> ResolutionReport:
    """Classify ``batch`` for ``user_id`` without writing anything."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        state = PersistedState.capture(
            repositories.completed_books.list_for_user(user_id),
            repositories.library_books.list_for_user(user_id),
        )

    results = classify_rows(
        batch.rows,
        state=state,
        provider=provider,
        max_workers=max_workers,
        timeout=timeout,
    )
    report = ResolutionReport(results=results, skipped_shelves=batch.skipped_shelves)
    log.info("Resolved import batch: %s", report.counts())
    return report


def classify_rows(
    rows: Sequence[NormalizedImportRow],
    *,
    state: PersistedState,
    provider: LookupProvider,
    max_workers: int = MAX_LOOKUP_WORKERS,
    timeout: float | None = None,
) -> tuple[ResolutionOutcome, ...]:
    workers = min(max(max_workers, 1), MAX_LOOKUP_WORKERS)
    outcomes: list[ResolutionOutcome | None] = [None] * len(rows)
    pending: list[tuple[int, Future[ResolutionOutcome]]] = []

    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lookup")
    try:
        for index, row in enumerate(rows):
            local = _classify_locally(index, row, state)
            if local is not None:
                outcomes[index] = local
                continue
            future = executor.submit(_resolve_externally, index, row, state, provider)
            pending.append((index, future))

        for index, future in pending:
            outcomes[index] = _collect(index, rows[index], future, timeout)
    finally:
        # a timed-out lookup must not hold the report back
        executor.shutdown(wait=False, cancel_futures=True)

    return tuple(outcome for outcome in outcomes if outcome is not None)


def _classify_locally(
    index: int,
    row: NormalizedImportRow,
    state: PersistedState,
) -> ResolutionOutcome | None:
    if not row.has_title:
        return Invalid(index=index, row=row)
    matched = _match_persisted(index, row, compute_keys(row), row.isbn, state)
    if matched is None and not (row.author or row.isbn):
        return NeedsReview(index=index, row=row, reason=NO_MATCH)
    return matched


def _match_persisted(
    index: int,
    row: NormalizedImportRow,
    keys: Iterable[str],
    isbn: str | None,
    state: PersistedState,
) -> Duplicate | LibraryUpdate | None:
    existing = state.duplicate_of(keys)
    if existing is not None:
        existing_id, existing_title = existing
        return Duplicate(
            index=index,
            row=row,
            existing_id=existing_id,
            existing_title=existing_title,
        )

    target = state.library_target(isbn)
    if target is not None:
        return LibraryUpdate(
            index=index,
            row=row,
            library_book_id=target.id,
            library_title=target.title,
            current_status=target.status,
            current_date_finished=target.date_finished,
            new_date_finished=row.date_finished,
        )
    return None


def _resolve_externally(
    index: int,
    row: NormalizedImportRow,
    state: PersistedState,
    provider: LookupProvider,
) -> ResolutionOutcome:
    try:
        if row.author:
            return _resolve_by_title_author(index, row, row.author, state, provider)
        if row.isbn:
            metadata = provider.lookup_by_isbn(row.isbn)
            if metadata is not None:
                return Found(index=index, row=row, metadata=merge_metadata(row, metadata))
    except Exception as exc:  # noqa: BLE001 - any provider error degrades the row
        log.warning("Lookup failed for %r: %s", row.title, exc)
        return NeedsReview(index=index, row=row, reason=f"Lookup failed: {exc}")
    return NeedsReview(index=index, row=row, reason=NO_MATCH)


def _resolve_by_title_author(
    index: int,
    row: NormalizedImportRow,
    author: str,
    state: PersistedState,
    provider: LookupProvider,
) -> ResolutionOutcome:
    searched = provider.search_by_title_author(row.title, author, row.isbn)
    if not searched.isbn:
        return NeedsReview(index=index, row=row, reason=NO_MATCH)

    resolved = _match_persisted(index, row, (isbn_key(searched.isbn),), searched.isbn, state)
    if resolved is not None:
        return resolved

    try:
        detailed = provider.lookup_by_isbn(searched.isbn)
    except Exception as exc:  # noqa: BLE001 - fall back to the search result
        log.warning("ISBN lookup for %s failed, using search result: %s", searched.isbn, exc)
        detailed = None
    metadata = detailed if detailed is not None else searched
    if not metadata.isbn:
        metadata = replace(metadata, isbn=searched.isbn)
    return Found(index=index, row=row, metadata=merge_metadata(row, metadata))


def _collect(
    index: int,
    row: NormalizedImportRow,
    future: Future[ResolutionOutcome],
    timeout: float | None,
) -> ResolutionOutcome:
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        log.warning("Lookup timed out for %r", row.title)
        return NeedsReview(index=index, row=row, reason=LOOKUP_TIMED_OUT)


def merge_metadata(row: NormalizedImportRow, metadata: BookMetadata) -> NormalizedImportRow:
    """Overlay provider metadata on a row; completion date and ownership stay the row's."""

    return replace(
        row,
        title=metadata.title or row.title,
        author=metadata.author or row.author,
        isbn=metadata.isbn or row.isbn,
        page_count=metadata.page_count or row.page_count,
        genre=metadata.genre or row.genre,
        synopsis=metadata.synopsis or row.synopsis,
        tags=metadata.tags or row.tags,
        series_name=metadata.series_name or row.series_name,
        series_position=(
            metadata.series_position
            if metadata.series_position is not None
            else row.series_position
        ),
    )
