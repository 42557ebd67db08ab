"""Configuration for the OpenLibrary and Google Books metadata lookups."""

from __future__ import annotations

from dataclasses import dataclass

from shelfwise import __version__

from .env import env_float, env_int, optional_env
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_OPENLIBRARY_BASE_URL = "https://openlibrary.org"
DEFAULT_GOOGLE_BOOKS_BASE_URL = "https://www.googleapis.com/books/v1"
MAX_LOOKUP_WORKERS = 4


def has_content(payload: object) -> bool:
    """Only cache answers that actually describe a book."""

    if isinstance(payload, dict):
        return bool(payload) and payload.get("totalItems", 1) != 0
    return bool(payload)


@dataclass(frozen=True, slots=True)
class LookupConfig:
    openlibrary: ResilienceConfig
    google_books: ResilienceConfig
    google_api_key: str | None = None
    max_workers: int = MAX_LOOKUP_WORKERS
    timeout_seconds: float = 30.0


def _user_agent() -> str:
    contact = optional_env("SHELFWISE_CONTACT")
    base = f"shelfwise/{__version__}"
    return f"{base} ({contact})" if contact else base


def get_lookup_config() -> LookupConfig:
    """Build lookup settings, honouring the optional ``SHELFWISE_*`` overrides."""

    headers = {"User-Agent": _user_agent(), "Accept": "application/json"}
    openlibrary = ResilienceConfig(
        name="openlibrary",
        base_url=DEFAULT_OPENLIBRARY_BASE_URL,
        ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(enabled=True, should_cache=has_content),
        default_headers=headers,
    )
    google_books = ResilienceConfig(
        name="google_books",
        base_url=DEFAULT_GOOGLE_BOOKS_BASE_URL,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(enabled=True, should_cache=has_content),
        default_headers=headers,
    )

    workers = env_int("SHELFWISE_LOOKUP_WORKERS", MAX_LOOKUP_WORKERS)
    return LookupConfig(
        openlibrary=openlibrary,
        google_books=google_books,
        google_api_key=optional_env("GOOGLE_BOOKS_API_KEY"),
        max_workers=min(max(workers, 1), MAX_LOOKUP_WORKERS),
        timeout_seconds=env_float("SHELFWISE_LOOKUP_TIMEOUT", 30.0),
    )
