"""Translate OpenLibrary payloads into :class:`BookMetadata`."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shelfwise.adapters.book_metadata import (
    clean_synopsis,
    clean_tags,
    parse_series_string,
    position_from_title,
    series_from_subjects,
)
from shelfwise.domain.model import BookMetadata

from .schema import OpenLibraryText

if TYPE_CHECKING:
    from .schema import (
        OpenLibraryBookData,
        OpenLibrarySearch,
        OpenLibrarySearchDoc,
        OpenLibraryWork,
    )

GENRE_SUBJECTS = 3
TAG_SUBJECTS = 10

_EDITION_URL = re.compile(r"/books/(OL\d+M)")


@dataclass(frozen=True, slots=True)
class WorkDetails:
    description: str = ""
    series_name: str | None = None
    series_position: float | None = None


def _text(value: str | OpenLibraryText | None) -> str:
    if value is None:
        return ""
    if isinstance(value, OpenLibraryText):
        return value.value
    return value


def edition_id_from_url(url: str | None) -> str | None:
    if not url:
        return None
    match = _EDITION_URL.search(url)
    return match.group(1) if match else None


def work_details(work: OpenLibraryWork | None, *, title: str | None = None) -> WorkDetails:
    """Description and series of a work; series come from ``series`` then subjects."""

    if work is None:
        return WorkDetails()
    series_name: str | None = None
    series_position: float | None = None
    if work.series:
        series_name, series_position = parse_series_string(work.series[0])
    if not series_name:
        series_name = series_from_subjects(work.subjects)
        if series_name:
            series_position = position_from_title(title or work.title)
    return WorkDetails(
        description=_text(work.description),
        series_name=series_name,
        series_position=series_position,
    )


def translate_book_data(
    isbn: str,
    data: OpenLibraryBookData,
    work: OpenLibraryWork | None,
) -> BookMetadata:
    details = work_details(work, title=data.title)
    excerpt = data.excerpts[0].text if data.excerpts else ""
    synopsis = details.description or _text(data.notes) or excerpt

    series_name = details.series_name
    series_position = details.series_position
    if not series_name:
        series_name = series_from_subjects(data.subject_names)
        if series_name:
            series_position = position_from_title(data.title)

    subjects = data.subject_names
    return BookMetadata(
        isbn=isbn,
        title=data.title,
        author=", ".join(data.author_names) or None,
        page_count=data.number_of_pages or None,
        genre=", ".join(subjects[:GENRE_SUBJECTS]) or None,
        synopsis=clean_synopsis(synopsis) or None,
        tags=clean_tags(subjects[:TAG_SUBJECTS]),
        series_name=series_name,
        series_position=series_position,
    )


def best_search_doc(search: OpenLibrarySearch, title: str) -> OpenLibrarySearchDoc | None:
    """First English doc whose title overlaps ``title``, else the first English doc."""

    english = [doc for doc in search.docs if not doc.language or "eng" in doc.language]
    if not english:
        return None
    wanted = title.lower().strip()
    for doc in english:
        candidate = (doc.title or "").lower()
        if candidate in wanted or wanted in candidate:
            return doc
    return english[0]


def translate_search_doc(
    doc: OpenLibrarySearchDoc,
    work: OpenLibraryWork | None,
    *,
    title: str,
    author: str,
) -> BookMetadata:
    doc_title = doc.title or title
    details = work_details(work, title=doc_title)
    series_name = details.series_name
    series_position = details.series_position
    if not series_name:
        series_name = series_from_subjects(doc.subject)
        if series_name:
            series_position = position_from_title(doc_title)

    return BookMetadata(
        isbn=doc.isbn[0] if doc.isbn else None,
        title=doc_title,
        author=", ".join(doc.author_name) or author,
        page_count=doc.number_of_pages_median or None,
        genre=", ".join(doc.subject[:GENRE_SUBJECTS]) or None,
        synopsis=clean_synopsis(details.description) or None,
        tags=clean_tags(doc.subject[:TAG_SUBJECTS]),
        series_name=series_name,
        series_position=series_position,
    )
