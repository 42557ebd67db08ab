"""Cleaning helpers for metadata scraped from public book catalogues.

Catalogue subjects make noisy tags, descriptions often carry several
languages, and series information arrives as free text such as
``"The Lunar Chronicles -- bk. 3"``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

MAX_TAG_LENGTH: Final[int] = 25

_TAG_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s\-]")
_WHITESPACE = re.compile(r"\s+")

_OTHER_LANGUAGES = (
    r"En\s+Fran[çc]ais",
    r"In\s+French",
    r"En\s+Espa[ñn]ol",
    r"In\s+Spanish",
    r"En\s+Allemand",
    r"In\s+German",
    r"Auf\s+Deutsch",
    r"In\s+Italiano",
    r"In\s+Italian",
    r"Em\s+Portugu[êe]s",
    r"In\s+Portuguese",
)
_ENGLISH_SECTION = re.compile(
    r'[«"]?\s*In\s+English\s*:\s*(.*?)(?:\s*[«"]?\s*(?:' + "|".join(_OTHER_LANGUAGES) + r")\s*:)",
    re.IGNORECASE | re.DOTALL,
)
_OTHER_LANGUAGE_TAIL = re.compile(
    r'\n\s*[«"]?\s*(?:' + "|".join(_OTHER_LANGUAGES) + r")\s*:.*$",
    re.IGNORECASE | re.DOTALL,
)
_ENGLISH_PREFIX = re.compile(r'^\s*[«"]?\s*In\s+English\s*:\s*', re.IGNORECASE)

_SERIES_PATTERNS = (
    re.compile(
        r"^(.+?)\s*[-–—]+\s*(?:bk\.?|book|vol\.?|volume)\s*\.?\s*(\d+(?:\.\d+)?)\s*$", re.I
    ),
    re.compile(r"^(.+?),?\s*#(\d+(?:\.\d+)?)\s*$", re.I),
    re.compile(r"^(.+?),?\s*(?:book|vol\.?|volume)\s*(\d+(?:\.\d+)?)\s*$", re.I),
    re.compile(r"^(.+?)\s*\((?:book|vol\.?|volume)?\s*#?(\d+(?:\.\d+)?)\)\s*$", re.I),
    re.compile(r"^(.+?)\s+(\d+(?:\.\d+)?)\s*$", re.I),
)
_TITLE_POSITION_PATTERNS = (
    re.compile(r"\((?:book|vol\.?|volume|#)\s*(\d+(?:\.\d+)?)\)$", re.I),
    re.compile(r",?\s*(?:book|vol\.?|volume)\s*(\d+(?:\.\d+)?)$", re.I),
    re.compile(r"\s+#(\d+(?:\.\d+)?)$", re.I),
)
_SUBTITLE_BOOK_OF = re.compile(
    r"(?:book|vol\.?|volume)\s*(\d+(?:\.\d+)?)\s*(?:of|in)\s+(?:the\s+)?(.+)", re.I
)
_SUBTITLE_SERIES_BOOK = re.compile(
    r"(.+?)\s*(?:series)?,?\s*(?:book|vol\.?|volume)\s*(\d+(?:\.\d+)?)", re.I
)


def clean_tags(tags: Iterable[object]) -> tuple[str, ...]:
    """Keep short alphanumeric tags, deduplicated case-insensitively, in order."""

    seen: set[str] = set()
    cleaned: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        candidate = _WHITESPACE.sub(" ", _TAG_DISALLOWED.sub("", tag)).strip()
        if not candidate or len(candidate) > MAX_TAG_LENGTH:
            continue
        folded = candidate.lower()
        if folded in seen:
            continue
        seen.add(folded)
        cleaned.append(candidate)
    return tuple(cleaned)


def clean_synopsis(synopsis: str | None) -> str:
    """Reduce a possibly bilingual description to its English part."""

    if not synopsis:
        return ""
    english = _ENGLISH_SECTION.search(synopsis)
    cleaned = english.group(1) if english else _OTHER_LANGUAGE_TAIL.sub("", synopsis)
    cleaned = _ENGLISH_PREFIX.sub("", cleaned)
    return cleaned.lstrip(' \t\n\r«"').rstrip(' \t\n\r»"').strip()


def _normalize_author(name: str) -> str:
    return _WHITESPACE.sub(" ", re.sub(r"[.,]", " ", name.lower())).strip()


def _last_name(parts: list[str], original: str) -> str | None:
    if not parts:
        return None
    # "Last, First" puts the family name first
    return parts[0] if "," in original else parts[-1]


def authors_match(requested: str | None, found: str | None) -> bool:
    """Loose author comparison tolerant of initials and "Last, First" ordering."""

    if not requested or not found:
        return False
    wanted = _normalize_author(requested)
    candidate = _normalize_author(found)
    if wanted == candidate:
        return True

    wanted_parts = [part for part in re.split(r"[\s,]+", wanted) if part]
    found_parts = [part for part in re.split(r"[\s,]+", candidate) if part]
    if wanted_parts and all(
        any(found_part in part or part in found_part for found_part in found_parts)
        for part in wanted_parts
    ):
        return True

    wanted_last = _last_name(wanted_parts, requested)
    found_last = _last_name(found_parts, found)
    if not wanted_last or not found_last:
        return False
    return wanted_last in found_last or found_last in wanted_last


def normalize_series_name(name: str | None) -> str | None:
    if not name:
        return None
    normalized = re.sub(
        r"\s*[-–—]\s*(bk\.?|book|vol\.?|volume|series|novels?)\.?\s*$", "", name, flags=re.I
    )
    normalized = re.sub(r"\s+(series|novels?)\s*$", "", normalized, flags=re.I)
    normalized = re.sub(r"[,;:.\-–—]+\s*$", "", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()
    if not normalized:
        return None
    return " ".join(word[:1].upper() + word[1:] for word in normalized.lower().split(" "))


def parse_series_string(value: str | None) -> tuple[str | None, float | None]:
    """Split ``"Harry Potter #1"`` style strings into (name, position)."""

    if not value:
        return None, None
    for pattern in _SERIES_PATTERNS:
        match = pattern.match(value)
        if match:
            return normalize_series_name(match.group(1)), float(match.group(2))
    return normalize_series_name(value), None


def series_from_subjects(subjects: Iterable[str]) -> str | None:
    """Pick ``series:Name`` (or ``serie:Name``) out of catalogue subjects."""

    for subject in subjects:
        lowered = subject.lower()
        for prefix in ("series:", "serie:"):
            if lowered.startswith(prefix):
                return normalize_series_name(subject[len(prefix) :].replace("_", " ").strip())
    return None


def position_from_title(title: str | None) -> float | None:
    if not title:
        return None
    for pattern in _TITLE_POSITION_PATTERNS:
        match = pattern.search(title)
        if match:
            return float(match.group(1))
    return None


def series_from_subtitle(subtitle: str | None) -> tuple[str | None, float | None]:
    """Google Books subtitles: ``"Book 1 of The Hunger Games"`` or ``"Dune, Book 2"``."""

    if not subtitle:
        return None, None
    match = _SUBTITLE_BOOK_OF.search(subtitle)
    if match:
        return match.group(2).strip(), float(match.group(1))
    match = _SUBTITLE_SERIES_BOOK.search(subtitle)
    if match:
        return match.group(1).strip(), float(match.group(2))
    return None, None
