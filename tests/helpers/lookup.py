"""Scripted lookup provider for pipeline tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from shelfwise.domain.model import BookMetadata


@dataclass
class FakeLookupProvider:
    """Answers from dictionaries; a stored exception is raised instead of returned."""

    by_isbn: dict[str, BookMetadata | Exception] = field(default_factory=dict)
    by_title: dict[str, BookMetadata | Exception] = field(default_factory=dict)
    isbn_calls: list[str] = field(default_factory=list)
    search_calls: list[tuple[str, str, str | None]] = field(default_factory=list)
    block: threading.Event | None = None

    def lookup_by_isbn(self, isbn: str) -> BookMetadata | None:
        self.isbn_calls.append(isbn)
        answer = self.by_isbn.get(isbn)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def search_by_title_author(
        self,
        title: str,
        author: str,
        isbn: str | None = None,
    ) -> BookMetadata:
        self.search_calls.append((title, author, isbn))
        if self.block is not None:
            self.block.wait(timeout=5)
        answer = self.by_title.get(title)
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            return BookMetadata(title=title, author=author)
        return answer
