"""Port for external book metadata providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shelfwise.domain.model import BookMetadata


@runtime_checkable
class LookupProvider(Protocol):
    """Resolves books against an external catalogue.

    Implementations may raise; callers treat any exception as a failed lookup.
    """

    def lookup_by_isbn(self, isbn: str) -> BookMetadata | None: ...

    def search_by_title_author(
        self,
        title: str,
        author: str,
        isbn: str | None = None,
    ) -> BookMetadata:
        """Search by title and author; ``result.isbn`` is None when nothing matched."""
        ...
