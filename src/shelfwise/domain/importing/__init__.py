"""Import pipeline: normalize, resolve, commit."""

from __future__ import annotations

from shelfwise.domain.importing.commit import (
    CommitResult,
    ImportCommitRequest,
    LibraryUpdateRequest,
    commit_import,
    completed_book_from_row,
)
from shelfwise.domain.importing.normalize import detect_dialect, normalize_import, normalize_row
from shelfwise.domain.importing.resolve import (
    Duplicate,
    Found,
    Invalid,
    LibraryUpdate,
    NeedsReview,
    ResolutionOutcome,
    ResolutionReport,
    resolve_import,
)
from shelfwise.domain.importing.rows import NormalizedBatch, NormalizedImportRow, is_owned

__all__ = [
    "CommitResult",
    "Duplicate",
    "Found",
    "ImportCommitRequest",
    "Invalid",
    "LibraryUpdate",
    "LibraryUpdateRequest",
    "NeedsReview",
    "NormalizedBatch",
    "NormalizedImportRow",
    "ResolutionOutcome",
    "ResolutionReport",
    "commit_import",
    "completed_book_from_row",
    "detect_dialect",
    "is_owned",
    "normalize_import",
    "normalize_row",
    "resolve_import",
]
