"""Google Books API client."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from pydantic import ValidationError

from shelfwise.adapters.http_resilience import ResilientClient
from shelfwise.domain.errors import LookupFailure

from .schema import VolumeSearch

if TYPE_CHECKING:
    from collections.abc import Callable

    from shelfwise.config.http_resilience import ResilienceConfig

SEARCH_LIMIT = 10


class GoogleBooksAPIError(LookupFailure):
    """Raised when Google Books answers with an error status or an unexpected payload."""


class GoogleBooksClient:
    """Low-level HTTP client for the Google Books volumes endpoint."""

    def __init__(
        self,
        *,
        config: ResilienceConfig,
        api_key: str | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config
        self._api_key = api_key
        self._client_factory = client_factory or ResilientClient

    def volumes_by_isbn(self, isbn: str) -> VolumeSearch:
        return asyncio.run(self._volumes({"q": f"isbn:{isbn}"}))

    def search_volumes(self, title: str, author: str) -> VolumeSearch:
        return asyncio.run(
            self._volumes(
                {
                    "q": f"intitle:{title} inauthor:{author}",
                    "maxResults": str(SEARCH_LIMIT),
                    "langRestrict": "en",
                }
            )
        )

    async def _volumes(self, params: dict[str, str]) -> VolumeSearch:
        if self._resilience.base_url is None:
            raise GoogleBooksAPIError("Missing Google Books base_url in resilience configuration")
        if self._api_key:
            params = {**params, "key": self._api_key}

        async with self._client_factory(self._resilience) as client:
            payload = await client.get_json(
                "/volumes", service="Google Books", failure=GoogleBooksAPIError, params=params
            )
        if payload is None:
            return VolumeSearch()
        try:
            return VolumeSearch.model_validate(payload)
        except ValidationError as exc:
            raise GoogleBooksAPIError("Unexpected Google Books volumes payload") from exc
