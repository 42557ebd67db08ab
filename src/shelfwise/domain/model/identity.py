"""Source-tagged identities for unified entries.

Inside the domain an entry id is always one of the two variants below. The
``library_N`` / ``completed_N`` strings exist only at the outer boundary
(CLI, exports) and are produced and consumed exclusively here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Final, Literal

from shelfwise.domain.errors import InvalidEntryIdError
from shelfwise.domain.model.enums import EntrySource

LIBRARY_PREFIX: Final[str] = "library_"
COMPLETED_PREFIX: Final[str] = "completed_"


@dataclass(frozen=True, slots=True)
class LibraryEntryId:
    SOURCE: ClassVar[Literal[EntrySource.LIBRARY]] = EntrySource.LIBRARY

    id: int


@dataclass(frozen=True, slots=True)
class CompletedEntryId:
    SOURCE: ClassVar[Literal[EntrySource.COMPLETED]] = EntrySource.COMPLETED

    id: int


type UnifiedId = LibraryEntryId | CompletedEntryId


def parse_unified_id(value: str | int) -> UnifiedId:
    """Parse a boundary id; unprefixed ids are legacy completed-book ids."""

    text = str(value).strip()
    if text.startswith(LIBRARY_PREFIX):
        return LibraryEntryId(_numeric_part(text[len(LIBRARY_PREFIX) :], text))
    if text.startswith(COMPLETED_PREFIX):
        return CompletedEntryId(_numeric_part(text[len(COMPLETED_PREFIX) :], text))
    return CompletedEntryId(_numeric_part(text, text))


def format_unified_id(entry_id: UnifiedId) -> str:
    match entry_id:
        case LibraryEntryId(id=numeric):
            return f"{LIBRARY_PREFIX}{numeric}"
        case CompletedEntryId(id=numeric):
            return f"{COMPLETED_PREFIX}{numeric}"


def _numeric_part(digits: str, original: str) -> int:
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidEntryIdError(f"Invalid book ID: {original!r}")
    numeric = int(digits)
    if numeric < 1:
        raise InvalidEntryIdError(f"Invalid book ID: {original!r}")
    return numeric
