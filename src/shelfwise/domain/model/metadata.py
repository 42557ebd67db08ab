"""Metadata returned by external book lookups."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class BookMetadata:
    """A provider's view of a book; ``isbn`` is None when nothing matched."""

    title: str
    author: str | None = None
    isbn: str | None = None
    page_count: int | None = None
    genre: str | None = None
    synopsis: str | None = None
    tags: tuple[str, ...] = ()
    series_name: str | None = None
    series_position: float | None = None
