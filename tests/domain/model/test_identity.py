from __future__ import annotations

import pytest

from shelfwise.domain.errors import InvalidEntryIdError
from shelfwise.domain.model import (
    CompletedEntryId,
    EntrySource,
    LibraryEntryId,
    format_unified_id,
    parse_unified_id,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("library_7", LibraryEntryId(7)),
        ("completed_12", CompletedEntryId(12)),
        ("12", CompletedEntryId(12)),
        (5, CompletedEntryId(5)),
    ],
)
def test_parse_unified_id(raw: str | int, expected: object) -> None:
    assert parse_unified_id(raw) == expected


@pytest.mark.parametrize(
    "raw", ["library_", "library_x", "completed_0", "abc", "-3", "library_1.5"]
)
def test_parse_unified_id_rejects_malformed_ids(raw: str) -> None:
    with pytest.raises(InvalidEntryIdError, match="Invalid book ID"):
        parse_unified_id(raw)


def test_format_round_trips_with_source_tag() -> None:
    library = parse_unified_id("library_3")

    assert format_unified_id(library) == "library_3"
    assert format_unified_id(CompletedEntryId(9)) == "completed_9"
    assert library.SOURCE is EntrySource.LIBRARY
