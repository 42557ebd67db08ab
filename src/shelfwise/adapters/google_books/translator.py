"""Translate Google Books volumes into :class:`BookMetadata`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shelfwise.adapters.book_metadata import clean_synopsis, clean_tags, series_from_subtitle
from shelfwise.domain.model import BookMetadata

if TYPE_CHECKING:
    from .schema import VolumeInfo, VolumeSearch


def series_info(info: VolumeInfo) -> tuple[str | None, float | None]:
    """Series from the subtitle, else from ``seriesInfo``."""

    name, position = series_from_subtitle(info.subtitle)
    if name:
        return name, position
    if info.series_info is None:
        return None, None
    series = info.series_info
    order = series.volume_series[0].order_number if series.volume_series else None
    return series.short_series_book_title or series.book_display_number, order


def translate_volume(
    info: VolumeInfo,
    *,
    isbn: str | None = None,
    title: str = "",
    author: str | None = None,
) -> BookMetadata:
    series_name, series_position = series_info(info)
    return BookMetadata(
        isbn=isbn if isbn is not None else info.isbn(),
        title=info.title or title,
        author=", ".join(info.authors) or author,
        page_count=info.page_count or None,
        genre=", ".join(info.categories) or None,
        synopsis=clean_synopsis(info.description) or None,
        tags=clean_tags(info.categories),
        series_name=series_name,
        series_position=series_position,
    )


def best_english_volume(search: VolumeSearch) -> VolumeInfo | None:
    """First English volume carrying an ISBN, else the first English volume."""

    fallback: VolumeInfo | None = None
    for volume in search.items:
        info = volume.volume_info
        if info.language and info.language != "en":
            continue
        if info.isbn():
            return info
        if fallback is None:
            fallback = info
    return fallback
