"""OpenLibrary lookups returning :class:`BookMetadata`."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .client import OpenLibraryAPIError, OpenLibraryClient
from .translator import (
    best_search_doc,
    edition_id_from_url,
    translate_book_data,
    translate_search_doc,
)

if TYPE_CHECKING:
    from shelfwise.config.http_resilience import ResilienceConfig
    from shelfwise.domain.model import BookMetadata

    from .schema import OpenLibraryBookData, OpenLibraryEdition, OpenLibrarySearch, OpenLibraryWork

log = getLogger(__name__)


class OpenLibraryApi(Protocol):
    def fetch_book_data(self, isbn: str) -> OpenLibraryBookData | None: ...

    def fetch_edition(self, edition_id: str) -> OpenLibraryEdition | None: ...

    def fetch_work(self, work_key: str) -> OpenLibraryWork | None: ...

    def search(self, title: str, author: str) -> OpenLibrarySearch: ...


class OpenLibraryLookup:
    """ISBN lookups and title/author searches against OpenLibrary.

    Work and edition details are best effort: when they cannot be fetched the
    result simply carries no description or series.
    """

    def __init__(
        self,
        *,
        config: ResilienceConfig | None = None,
        client: OpenLibraryApi | None = None,
    ) -> None:
        if client is None:
            if config is None:
                raise ValueError("OpenLibraryLookup needs a config or a client")
            client = OpenLibraryClient(config=config)
        self._client = client

    def by_isbn(self, isbn: str) -> BookMetadata | None:
        data = self._client.fetch_book_data(isbn)
        if data is None:
            return None
        work = self._work_for_edition(edition_id_from_url(data.url))
        return translate_book_data(isbn, data, work)

    def search(self, title: str, author: str) -> BookMetadata | None:
        doc = best_search_doc(self._client.search(title, author), title)
        if doc is None:
            return None
        work = self._work(doc.key) if doc.key else None
        return translate_search_doc(doc, work, title=title, author=author)

    def _work_for_edition(self, edition_id: str | None) -> OpenLibraryWork | None:
        if edition_id is None:
            return None
        try:
            edition = self._client.fetch_edition(edition_id)
        except OpenLibraryAPIError as exc:
            log.debug("Skipping OpenLibrary edition %s: %s", edition_id, exc)
            return None
        if edition is None or not edition.works:
            return None
        return self._work(edition.works[0].key)

    def _work(self, work_key: str) -> OpenLibraryWork | None:
        try:
            return self._client.fetch_work(work_key)
        except OpenLibraryAPIError as exc:
            log.debug("Skipping OpenLibrary work %s: %s", work_key, exc)
            return None
