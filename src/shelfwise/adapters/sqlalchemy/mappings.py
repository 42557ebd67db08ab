"""SQLAlchemy mapping metadata for the shelfwise domain model."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)

from shelfwise.domain.model import (
    MAX_RATING,
    MIN_RATING,
    CompletedBook,
    CompletedRating,
    LibraryBook,
    LibraryRating,
    ReadingStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class TagListType(TypeDecorator[list[str]]):
    """Ordered tag list stored as a JSON array in a text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(list(value or []), ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if not value:
            return []
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            log.warning("Discarding unreadable tag list: %r", value)
            return []
        if not isinstance(decoded, list):
            return []
        return [str(item) for item in decoded]


mapper_registry = orm.registry()
metadata = mapper_registry.metadata


def _book_columns() -> list[Column[Any]]:
    return [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("user_id", Integer, nullable=False, index=True),
        Column("isbn", String(32), nullable=True),
        Column("title", String(512), nullable=False),
        Column("author", String(512), nullable=True),
        Column("page_count", Integer, nullable=True),
        Column("genre", String(512), nullable=True),
        Column("synopsis", Text, nullable=True),
        Column("tags", TagListType(), nullable=False),
        Column("series_name", String(512), nullable=True),
        Column("series_position", Float, nullable=True),
        Column("date_finished", Date, nullable=True),
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
    ]


library_book_table = Table(
    "library_books",
    metadata,
    *_book_columns(),
    Column(
        "reading_status",
        Enum(ReadingStatus, native_enum=False),
        nullable=False,
        default=ReadingStatus.UNREAD,
    ),
    UniqueConstraint("user_id", "isbn", name="uq_library_books_user_isbn"),
    Index("ix_library_books_user_status", "user_id", "reading_status"),
)

completed_book_table = Table(
    "completed_books",
    metadata,
    *_book_columns(),
    Column("owned", Boolean, nullable=False, default=False),
)


def _rating_table(name: str, book_table: Table) -> Table:
    return Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(
            "book_id",
            Integer,
            ForeignKey(book_table.c.id, ondelete="CASCADE"),
            nullable=False,
        ),
        Column("user_id", Integer, nullable=False),
        Column("rating", Integer, nullable=False),
        Column("comment", Text, nullable=True),
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
        UniqueConstraint("book_id", "user_id", name=f"uq_{name}_book_user"),
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}",
            name=f"ck_{name}_rating_range",
        ),
    )


library_rating_table = _rating_table("library_book_ratings", library_book_table)
completed_rating_table = _rating_table("completed_book_ratings", completed_book_table)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(LibraryBook, library_book_table)
    mapper_registry.map_imperatively(CompletedBook, completed_book_table)
    mapper_registry.map_imperatively(LibraryRating, library_rating_table)
    mapper_registry.map_imperatively(CompletedRating, completed_rating_table)

    mapper_registry.configure()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
