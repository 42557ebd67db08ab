"""Public domain model surface."""

from __future__ import annotations

from shelfwise.domain.model.books import (
    MAX_COMMENT_LENGTH,
    MAX_RATING,
    MIN_RATING,
    BookRecord,
    CompletedBook,
    CompletedRating,
    LibraryBook,
    LibraryRating,
    Rating,
    utcnow,
)
from shelfwise.domain.model.entry import UnifiedEntry
from shelfwise.domain.model.enums import (
    EntrySource,
    ExportFormat,
    ExportType,
    ImportDialect,
    ImportFormat,
    ReadingStatus,
)
from shelfwise.domain.model.identity import (
    CompletedEntryId,
    LibraryEntryId,
    UnifiedId,
    format_unified_id,
    parse_unified_id,
)
from shelfwise.domain.model.metadata import BookMetadata

__all__ = [  # noqa: RUF022
    # books
    "BookRecord",
    "LibraryBook",
    "CompletedBook",
    "Rating",
    "LibraryRating",
    "CompletedRating",
    "MIN_RATING",
    "MAX_RATING",
    "MAX_COMMENT_LENGTH",
    "utcnow",
    # projections and identity
    "UnifiedEntry",
    "UnifiedId",
    "LibraryEntryId",
    "CompletedEntryId",
    "parse_unified_id",
    "format_unified_id",
    "BookMetadata",
    # enums
    "EntrySource",
    "ExportFormat",
    "ExportType",
    "ImportDialect",
    "ImportFormat",
    "ReadingStatus",
]
