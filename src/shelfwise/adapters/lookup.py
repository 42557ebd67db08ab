"""Composite metadata provider backed by OpenLibrary and Google Books."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from shelfwise.adapters.book_metadata import authors_match, clean_synopsis
from shelfwise.adapters.google_books import GoogleBooksLookup
from shelfwise.adapters.openlibrary import OpenLibraryLookup
from shelfwise.config.lookup import get_lookup_config
from shelfwise.domain.errors import LookupFailure
from shelfwise.domain.model import BookMetadata

if TYPE_CHECKING:
    from collections.abc import Callable

    from shelfwise.config.lookup import LookupConfig

log = getLogger(__name__)

_ISBN_SEPARATORS = re.compile(r"[-\s]")


class CatalogueLookup(Protocol):
    def by_isbn(self, isbn: str) -> BookMetadata | None: ...

    def search(self, title: str, author: str) -> BookMetadata | None: ...


@dataclass(slots=True)
class _Attempt:
    result: BookMetadata | None = None
    error: LookupFailure | None = None


def _attempt(service: str, call: Callable[[], BookMetadata | None]) -> _Attempt:
    try:
        return _Attempt(result=call())
    except LookupFailure as exc:
        log.warning("%s lookup failed: %s", service, exc)
        return _Attempt(error=exc)


class CompositeLookupProvider:
    """OpenLibrary first, Google Books as the fallback and synopsis source.

    A service error only surfaces as :class:`LookupFailure` when no service
    produced an answer.
    """

    def __init__(self, *, openlibrary: CatalogueLookup, google_books: CatalogueLookup) -> None:
        self._openlibrary = openlibrary
        self._google_books = google_books

    def lookup_by_isbn(self, isbn: str) -> BookMetadata | None:
        clean = _ISBN_SEPARATORS.sub("", isbn)
        primary = _attempt("OpenLibrary", lambda: self._openlibrary.by_isbn(clean))
        if primary.result is not None:
            if primary.result.synopsis:
                return primary.result
            return self._with_google_synopsis(clean, primary.result)

        fallback = _attempt("Google Books", lambda: self._google_books.by_isbn(clean))
        if fallback.result is not None:
            return fallback.result
        error = primary.error or fallback.error
        if error is not None:
            raise error
        return None

    def search_by_title_author(
        self,
        title: str,
        author: str,
        isbn: str | None = None,
    ) -> BookMetadata:
        openlibrary = _attempt(
            "OpenLibrary search", lambda: self._openlibrary.search(title, author)
        )
        google = _attempt("Google Books search", lambda: self._google_books.search(title, author))
        ol_match = _matching(author, openlibrary.result)
        google_match = _matching(author, google.result)

        # search isbns win over the supplied one, which may be a foreign edition
        found_isbn = (
            (ol_match.isbn if ol_match else None)
            or (google_match.isbn if google_match else None)
            or isbn
        )
        detailed: BookMetadata | None = None
        if found_isbn:
            try:
                detailed = _matching(author, self.lookup_by_isbn(found_isbn))
            except LookupFailure as exc:
                log.warning("ISBN lookup for %s failed during search: %s", found_isbn, exc)

        sources = [source for source in (detailed, ol_match, google_match) if source is not None]
        if not sources:
            if openlibrary.error is not None and google.error is not None:
                raise openlibrary.error
            return BookMetadata(title=title, author=author)
        return _merge(sources, isbn=found_isbn, title=title, author=author)

    def _with_google_synopsis(self, isbn: str, metadata: BookMetadata) -> BookMetadata:
        try:
            google = self._google_books.by_isbn(isbn)
        except LookupFailure as exc:
            log.debug("Google Books synopsis for %s unavailable: %s", isbn, exc)
            return metadata
        if google is None or not google.synopsis:
            return metadata
        return replace(metadata, synopsis=google.synopsis)


def _matching(author: str, metadata: BookMetadata | None) -> BookMetadata | None:
    if metadata is None or not authors_match(author, metadata.author):
        return None
    return metadata


def _merge(
    sources: list[BookMetadata],
    *,
    isbn: str | None,
    title: str,
    author: str,
) -> BookMetadata:
    """First non-empty value per field, in source priority order."""

    def first[T](pick: Callable[[BookMetadata], T | None]) -> T | None:
        for source in sources:
            value = pick(source)
            if value:
                return value
        return None

    position = next(
        (source.series_position for source in sources if source.series_position is not None),
        None,
    )
    return BookMetadata(
        isbn=isbn,
        title=first(lambda source: source.title) or title,
        author=first(lambda source: source.author) or author,
        page_count=first(lambda source: source.page_count),
        genre=first(lambda source: source.genre),
        synopsis=clean_synopsis(first(lambda source: source.synopsis)) or None,
        tags=first(lambda source: source.tags) or (),
        series_name=first(lambda source: source.series_name),
        series_position=position,
    )


def build_lookup_provider(config: LookupConfig | None = None) -> CompositeLookupProvider:
    active = config or get_lookup_config()
    return CompositeLookupProvider(
        openlibrary=OpenLibraryLookup(config=active.openlibrary),
        google_books=GoogleBooksLookup(config=active.google_books, api_key=active.google_api_key),
    )
