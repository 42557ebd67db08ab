"""Composition of library-read and completed-only books into one list."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shelfwise.domain.dedup import KeyIndex, compute_keys
from shelfwise.domain.model import UnifiedEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shelfwise.domain.model import CompletedBook, LibraryBook


def compose_unified_view(
    library_read: Iterable[LibraryBook],
    completed: Iterable[CompletedBook],
) -> list[UnifiedEntry]:
    """Merge both tables into entries where the library copy always wins.

    A completed book is suppressed when it shares a dedup key with a library
    book already emitted; it is also dropped when it collides with an earlier
    completed book, so no two entries in the result share a key. Inputs are
    processed in id order, which keeps the output stable across calls.
    """

    seen: KeyIndex[UnifiedEntry] = KeyIndex(keys_of=compute_keys)
    entries: list[UnifiedEntry] = []

    for book in sorted(library_read, key=_id_order):
        entry = UnifiedEntry.project(book)
        if seen.intersects(compute_keys(entry)):
            continue
        seen.add(entry)
        entries.append(entry)

    for book in sorted(completed, key=_id_order):
        keys = compute_keys(book)
        if seen.intersects(keys):
            continue
        entry = UnifiedEntry.project(book)
        seen.add(entry)
        entries.append(entry)

    return sort_entries(entries)


def sort_entries(entries: Iterable[UnifiedEntry]) -> list[UnifiedEntry]:
    """Newest completion first, undated last, then newest created first."""

    return sorted(
        entries,
        key=lambda entry: (
            entry.date_finished.isoformat() if entry.date_finished else "",
            entry.created_at,
        ),
        reverse=True,
    )


def _id_order(book: LibraryBook | CompletedBook) -> int:
    return book.id or 0
