"""OpenLibrary API client."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from pydantic import ValidationError

from shelfwise.adapters.http_resilience import ResilientClient
from shelfwise.domain.errors import LookupFailure

from .schema import OpenLibraryBookData, OpenLibraryEdition, OpenLibrarySearch, OpenLibraryWork

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

    from shelfwise.config.http_resilience import ResilienceConfig

SEARCH_LIMIT = 10


class OpenLibraryAPIError(LookupFailure):
    """Raised when OpenLibrary answers with an error status or an unexpected payload."""


class OpenLibraryClient:
    """Low-level HTTP client for openlibrary.org.

    Every public method runs its own event loop, so instances may be shared
    between lookup worker threads.
    """

    def __init__(
        self,
        *,
        config: ResilienceConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config
        self._client_factory = client_factory or ResilientClient

    def fetch_book_data(self, isbn: str) -> OpenLibraryBookData | None:
        """Edition data for ``isbn`` or None when OpenLibrary does not know it."""

        payload = asyncio.run(
            self._get_json(
                "/api/books",
                params={"bibkeys": f"ISBN:{isbn}", "format": "json", "jscmd": "data"},
            )
        )
        if payload is None:
            return None
        entry = payload.get(f"ISBN:{isbn}")
        if not entry:
            return None
        return _validate(OpenLibraryBookData, entry)

    def fetch_edition(self, edition_id: str) -> OpenLibraryEdition | None:
        payload = asyncio.run(self._get_json(f"/books/{edition_id}.json"))
        return None if payload is None else _validate(OpenLibraryEdition, payload)

    def fetch_work(self, work_key: str) -> OpenLibraryWork | None:
        path = work_key if work_key.startswith("/") else f"/{work_key}"
        payload = asyncio.run(self._get_json(f"{path}.json"))
        return None if payload is None else _validate(OpenLibraryWork, payload)

    def search(self, title: str, author: str) -> OpenLibrarySearch:
        payload = asyncio.run(
            self._get_json(
                "/search.json",
                params={
                    "q": f"{title} {author}".strip(),
                    "limit": str(SEARCH_LIMIT),
                    "language": "eng",
                },
            )
        )
        if payload is None:
            return OpenLibrarySearch()
        return _validate(OpenLibrarySearch, payload)

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, object] | None:
        if self._resilience.base_url is None:
            raise OpenLibraryAPIError("Missing OpenLibrary base_url in resilience configuration")

        async with self._client_factory(self._resilience) as client:
            return await client.get_json(
                path, service="OpenLibrary", failure=OpenLibraryAPIError, params=params
            )


def _validate[TModel: BaseModel](model: type[TModel], payload: object) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise OpenLibraryAPIError(f"Unexpected OpenLibrary {model.__name__} payload") from exc
