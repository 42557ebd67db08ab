"""Google Books lookups returning :class:`BookMetadata`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .client import GoogleBooksClient
from .translator import best_english_volume, translate_volume

if TYPE_CHECKING:
    from shelfwise.config.http_resilience import ResilienceConfig
    from shelfwise.domain.model import BookMetadata

    from .schema import VolumeSearch


class GoogleBooksApi(Protocol):
    def volumes_by_isbn(self, isbn: str) -> VolumeSearch: ...

    def search_volumes(self, title: str, author: str) -> VolumeSearch: ...


class GoogleBooksLookup:
    def __init__(
        self,
        *,
        config: ResilienceConfig | None = None,
        api_key: str | None = None,
        client: GoogleBooksApi | None = None,
    ) -> None:
        if client is None:
            if config is None:
                raise ValueError("GoogleBooksLookup needs a config or a client")
            client = GoogleBooksClient(config=config, api_key=api_key)
        self._client = client

    def by_isbn(self, isbn: str) -> BookMetadata | None:
        search = self._client.volumes_by_isbn(isbn)
        if not search.items:
            return None
        return translate_volume(search.items[0].volume_info, isbn=isbn)

    def search(self, title: str, author: str) -> BookMetadata | None:
        info = best_english_volume(self._client.search_volumes(title, author))
        if info is None:
            return None
        return translate_volume(info, title=title, author=author)
