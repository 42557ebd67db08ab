"""Payload schemas for the operator-reviewed import commit.

Field names are accepted in snake_case or camelCase; values arrive the way a
browser form or a JSON file would send them.
"""

from __future__ import annotations

import json
from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shelfwise.domain.importing.normalize import (
    clean_isbn,
    parse_count,
    parse_date,
    parse_flag,
    parse_page_count,
    parse_series_position,
    parse_tags,
)


class ReviewBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReviewedBook(ReviewBaseModel):
    title: str = ""
    author: str | None = None
    isbn: str | None = None
    page_count: int | None = Field(
        default=None, validation_alias=AliasChoices("page_count", "pageCount")
    )
    genre: str | None = None
    synopsis: str | None = None
    tags: tuple[str, ...] = ()
    series_name: str | None = Field(
        default=None, validation_alias=AliasChoices("series_name", "seriesName")
    )
    series_position: float | None = Field(
        default=None, validation_alias=AliasChoices("series_position", "seriesPosition")
    )
    date_finished: date | None = Field(
        default=None, validation_alias=AliasChoices("date_finished", "dateFinished")
    )
    owned: bool = False
    owned_copies: int = Field(
        default=0, validation_alias=AliasChoices("owned_copies", "ownedCopies")
    )

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("isbn", mode="before")
    @classmethod
    def _isbn(cls, value: object) -> str | None:
        return clean_isbn(value)

    @field_validator("page_count", mode="before")
    @classmethod
    def _page_count(cls, value: object) -> int | None:
        return parse_page_count(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: object) -> tuple[str, ...]:
        if isinstance(value, str) and value.lstrip().startswith("["):
            try:
                value = json.loads(value)
            except ValueError:
                pass
        return parse_tags(value)

    @field_validator("series_position", mode="before")
    @classmethod
    def _series_position(cls, value: object) -> float | None:
        return parse_series_position(value)

    @field_validator("date_finished", mode="before")
    @classmethod
    def _date_finished(cls, value: object) -> date | None:
        return parse_date(value)

    @field_validator("owned", mode="before")
    @classmethod
    def _owned(cls, value: object) -> bool:
        return parse_flag(value)

    @field_validator("owned_copies", mode="before")
    @classmethod
    def _owned_copies(cls, value: object) -> int:
        return parse_count(value)


class ReviewedLibraryUpdate(ReviewBaseModel):
    library_book_id: int = Field(
        validation_alias=AliasChoices("library_book_id", "libraryBookId")
    )
    new_date_finished: date | None = Field(
        default=None,
        validation_alias=AliasChoices("new_date_finished", "newDateFinished", "dateFinished"),
    )
    library_title: str | None = Field(
        default=None, validation_alias=AliasChoices("library_title", "libraryTitle")
    )

    @field_validator("new_date_finished", mode="before")
    @classmethod
    def _new_date_finished(cls, value: object) -> date | None:
        return parse_date(value)


class ReviewedCommit(ReviewBaseModel):
    books_to_import: list[ReviewedBook] = Field(
        default_factory=list, validation_alias=AliasChoices("books_to_import", "booksToImport")
    )
    library_updates: list[ReviewedLibraryUpdate] = Field(
        default_factory=list, validation_alias=AliasChoices("library_updates", "libraryUpdates")
    )
