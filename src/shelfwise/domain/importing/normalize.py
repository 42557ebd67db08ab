"""Normalization of heterogeneous import rows into :class:`NormalizedImportRow`.

Tabular sources (CSV and spreadsheets) are fingerprinted against the Goodreads
export header. When enough of its distinctive columns are present the rows get
the dialect corrections: ``="..."`` isbn quoting is removed, rows on a shelf
other than ``read`` are skipped, and ``bookshelves`` stands in for tags.
Synonym folding and value parsing apply to every source.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from typing import TYPE_CHECKING, Final

from shelfwise.domain.importing.rows import NormalizedBatch, NormalizedImportRow
from shelfwise.domain.importing.sources import read_source
from shelfwise.domain.model import ImportDialect

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from shelfwise.domain.model import ImportFormat

log = logging.getLogger(__name__)

GOODREADS_FINGERPRINT: Final[frozenset[str]] = frozenset(
    {
        "book_id",
        "exclusive_shelf",
        "bookshelves",
        "my_rating",
        "average_rating",
        "author_l-f",
    }
)
DIALECT_MATCH_THRESHOLD: Final[int] = 3
READ_SHELF: Final[str] = "read"

TITLE_FIELDS: Final = ("title", "book_title", "name")
AUTHOR_FIELDS: Final = ("author", "authors", "book_author")
ISBN_FIELDS: Final = ("isbn13", "isbn_13", "isbn", "isbn10", "isbn_10")
PAGE_COUNT_FIELDS: Final = ("page_count", "pages", "num_pages", "number_of_pages")
GENRE_FIELDS: Final = ("genre", "genres", "category")
SYNOPSIS_FIELDS: Final = ("synopsis", "description", "summary")
SERIES_NAME_FIELDS: Final = ("series_name", "series")
SERIES_POSITION_FIELDS: Final = ("series_position", "series_number", "book_number")
DATE_FINISHED_FIELDS: Final = (
    "date_finished",
    "date_read",
    "finished_date",
    "read_date",
    "date_completed",
)
GOODREADS_QUOTED_FIELDS: Final = ("isbn", "isbn13")

_TEXT_QUOTING = re.compile(r'^="?(.*?)"?$', re.DOTALL)
_TAG_SEPARATORS = re.compile(r"[,;]")
_LEADING_INT = re.compile(r"\s*(\d+)")
_LEADING_NUMBER = re.compile(r"\s*(-?\d+(?:\.\d+)?)")
_ISO_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})")
_SLASH_DATE = re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})")
_DATE_FORMATS: Final = ("%m/%d/%Y", "%d %B %Y", "%d %b %Y", "%B %d, %Y", "%b %d, %Y")
_TRUTHY_FLAGS: Final = frozenset({"yes", "true", "1"})


def detect_dialect(headers: Iterable[str]) -> ImportDialect:
    matches = GOODREADS_FINGERPRINT.intersection(headers)
    if len(matches) >= DIALECT_MATCH_THRESHOLD:
        return ImportDialect.GOODREADS
    return ImportDialect.GENERIC


def normalize_import(data: object, import_format: ImportFormat | str) -> NormalizedBatch:
    """Decode ``data`` in the declared format and normalize every row.

    Raises :class:`~shelfwise.domain.errors.ImportParseError` when the payload
    cannot be read at all; individual bad values only degrade to ``None``.
    """

    table = read_source(data, import_format)
    dialect = detect_dialect(table.headers) if table.has_header_row else ImportDialect.GENERIC

    rows: list[NormalizedImportRow] = []
    skipped_shelves = 0
    for raw in table.rows:
        if dialect is ImportDialect.GOODREADS and not _on_read_shelf(raw):
            skipped_shelves += 1
            continue
        rows.append(normalize_row(raw, dialect=dialect))

    log.info(
        "Normalized %d rows (dialect=%s, skipped_shelves=%d)",
        len(rows),
        dialect,
        skipped_shelves,
    )
    return NormalizedBatch(rows=tuple(rows), skipped_shelves=skipped_shelves, dialect=dialect)


def normalize_row(
    raw: Mapping[str, object],
    *,
    dialect: ImportDialect = ImportDialect.GENERIC,
) -> NormalizedImportRow:
    if dialect is ImportDialect.GOODREADS:
        raw = {
            key: strip_text_quoting(value) if key in GOODREADS_QUOTED_FIELDS else value
            for key, value in raw.items()
        }

    tags = parse_tags(raw.get("tags"))
    if not tags and dialect is ImportDialect.GOODREADS:
        tags = parse_tags(raw.get("bookshelves"))

    return NormalizedImportRow(
        title=_text(_first(raw, TITLE_FIELDS)) or "",
        author=_text(_first(raw, AUTHOR_FIELDS)),
        isbn=clean_isbn(_first(raw, ISBN_FIELDS)),
        page_count=parse_page_count(_first(raw, PAGE_COUNT_FIELDS)),
        genre=_text(_first(raw, GENRE_FIELDS)),
        synopsis=_text(_first(raw, SYNOPSIS_FIELDS)),
        tags=tags,
        series_name=_text(_first(raw, SERIES_NAME_FIELDS)),
        series_position=parse_series_position(_first(raw, SERIES_POSITION_FIELDS)),
        date_finished=parse_date(_first(raw, DATE_FINISHED_FIELDS)),
        owned_flag=parse_flag(raw.get("owned")),
        owned_copies=parse_count(raw.get("owned_copies")),
    )


def strip_text_quoting(value: object) -> object:
    """Undo the ``="0441172717"`` trick spreadsheet exports use to keep leading zeros."""

    if not isinstance(value, str):
        return value
    match = _TEXT_QUOTING.match(value.strip())
    return match.group(1) if match else value


def clean_isbn(value: object) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        value = int(value)
    text = str(strip_text_quoting(str(value)))
    candidate = re.sub(r"[^0-9Xx]", "", text).upper()
    # X is only meaningful as the ISBN-10 check character
    candidate = candidate[:-1].replace("X", "") + candidate[-1:]
    return candidate or None


def parse_page_count(value: object) -> int | None:
    count: int | None = None
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        count = int(value) if math.isfinite(value) else None
    elif isinstance(value, str) and (match := _LEADING_INT.match(value)):
        count = int(match.group(1))
    return count or None


def parse_series_position(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str) and (match := _LEADING_NUMBER.match(value)):
        return float(match.group(1))
    return None


def parse_tags(value: object) -> tuple[str, ...]:
    if isinstance(value, list | tuple):
        parts = [str(item).strip() for item in value if item is not None]
    elif isinstance(value, str):
        parts = [part.strip() for part in _TAG_SEPARATORS.split(value)]
    else:
        return ()
    return tuple(part for part in parts if part)


def parse_date(value: object) -> date | None:
    """Parse a completion date; anything unrecognised becomes ``None``."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    if match := _ISO_DATE.match(text):
        try:
            return date.fromisoformat(match.group(1))
        except ValueError:
            return None
    if match := _SLASH_DATE.fullmatch(text):
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


def parse_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_FLAGS
    return False


def parse_count(value: object) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str) and (match := _LEADING_INT.match(value)):
        return int(match.group(1))
    return 0


def _on_read_shelf(raw: Mapping[str, object]) -> bool:
    shelf = _text(raw.get("exclusive_shelf"))
    return not shelf or shelf.lower() == READ_SHELF


def _first(raw: Mapping[str, object], names: Iterable[str]) -> object:
    for name in names:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, list | tuple) and not value:
            continue
        return value
    return None


def _text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None
