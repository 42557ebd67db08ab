"""Identity keys deciding whether two book records describe the same work.

A record yields ``isbn:<isbn>`` when it has an isbn and
``ta:<title>|<author>`` (lowercased) when it has both a title and an author.
Two records match when their key sets share any key. A record with neither
yields no keys and therefore never matches anything.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

type DedupKey = str


class Keyable(Protocol):
    @property
    def isbn(self) -> str | None: ...

    @property
    def title(self) -> str | None: ...

    @property
    def author(self) -> str | None: ...


def isbn_key(isbn: str) -> DedupKey:
    return f"isbn:{isbn}"


def title_author_key(title: str, author: str) -> DedupKey:
    return f"ta:{title.lower()}|{author.lower()}"


def compute_keys(record: Keyable) -> tuple[DedupKey, ...]:
    keys: list[DedupKey] = []
    if record.isbn:
        keys.append(isbn_key(record.isbn))
    if record.title and record.author:
        keys.append(title_author_key(record.title, record.author))
    return tuple(keys)


def same_work(left: Keyable, right: Keyable) -> bool:
    return not set(compute_keys(left)).isdisjoint(compute_keys(right))


class KeyIndex[T]:
    """Maps dedup keys to the first record registered under them."""

    def __init__(
        self,
        records: Iterable[T] = (),
        *,
        keys_of: Callable[[T], Iterable[DedupKey]],
    ) -> None:
        self._keys_of = keys_of
        self._index: dict[DedupKey, T] = {}
        for record in records:
            self.add(record)

    def add(self, record: T) -> None:
        for key in self._keys_of(record):
            self._index.setdefault(key, record)

    def match(self, keys: Iterable[DedupKey]) -> T | None:
        for key in keys:
            found = self._index.get(key)
            if found is not None:
                return found
        return None

    def intersects(self, keys: Iterable[DedupKey]) -> bool:
        return any(key in self._index for key in keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[DedupKey]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)
