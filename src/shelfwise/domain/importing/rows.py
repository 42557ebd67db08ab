"""The closed row shape every import source is normalized into."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from shelfwise.domain.model import ImportDialect


@dataclass(frozen=True, slots=True, kw_only=True)
class NormalizedImportRow:
    title: str
    author: str | None = None
    isbn: str | None = None
    page_count: int | None = None
    genre: str | None = None
    synopsis: str | None = None
    tags: tuple[str, ...] = ()
    series_name: str | None = None
    series_position: float | None = None
    date_finished: date | None = None
    owned_flag: bool = False
    owned_copies: int = 0

    @property
    def owned(self) -> bool:
        return is_owned(self)

    @property
    def has_title(self) -> bool:
        return bool(self.title and self.title.strip())


def is_owned(row: NormalizedImportRow) -> bool:
    """A row is owned when flagged explicitly or when it reports owned copies."""

    return row.owned_flag or row.owned_copies > 0


@dataclass(frozen=True, slots=True)
class NormalizedBatch:
    """Normalizer output: rows to classify plus rows excluded by shelf."""

    rows: tuple[NormalizedImportRow, ...]
    skipped_shelves: int
    dialect: ImportDialect

    @property
    def total(self) -> int:
        return len(self.rows)
