from __future__ import annotations

from dataclasses import dataclass, field

from shelfwise.adapters.openlibrary import OpenLibraryAPIError, OpenLibraryLookup
from shelfwise.adapters.openlibrary.schema import (
    OpenLibraryBookData,
    OpenLibraryEdition,
    OpenLibrarySearch,
    OpenLibraryWork,
)

ISBN = "9780441172719"

BOOK_DATA = OpenLibraryBookData.model_validate(
    {
        "title": "Dune",
        "url": "https://openlibrary.org/books/OL26242482M/Dune",
        "authors": [{"name": "Frank Herbert"}],
        "number_of_pages": 412,
        "subjects": [
            {"name": "Science Fiction"},
            {"name": "Deserts"},
            {"name": "Ecology"},
            {"name": "Fiction, general"},
        ],
        "notes": "Edition notes.",
    }
)
WORK = OpenLibraryWork.model_validate(
    {
        "key": "/works/OL893415W",
        "title": "Dune",
        "description": {"type": "/type/text", "value": "Set on the desert planet Arrakis."},
        "series": ["Dune Chronicles -- bk. 1"],
    }
)


@dataclass
class FakeOpenLibrary:
    book_data: dict[str, OpenLibraryBookData] = field(default_factory=dict)
    editions: dict[str, OpenLibraryEdition] = field(default_factory=dict)
    works: dict[str, OpenLibraryWork | Exception] = field(default_factory=dict)
    search_result: OpenLibrarySearch = field(default_factory=OpenLibrarySearch)

    def fetch_book_data(self, isbn: str) -> OpenLibraryBookData | None:
        return self.book_data.get(isbn)

    def fetch_edition(self, edition_id: str) -> OpenLibraryEdition | None:
        return self.editions.get(edition_id)

    def fetch_work(self, work_key: str) -> OpenLibraryWork | None:
        work = self.works.get(work_key)
        if isinstance(work, Exception):
            raise work
        return work

    def search(self, title: str, author: str) -> OpenLibrarySearch:
        return self.search_result


def _edition() -> OpenLibraryEdition:
    return OpenLibraryEdition.model_validate({"works": [{"key": "/works/OL893415W"}]})


def test_by_isbn_enriches_from_work() -> None:
    api = FakeOpenLibrary(
        book_data={ISBN: BOOK_DATA},
        editions={"OL26242482M": _edition()},
        works={"/works/OL893415W": WORK},
    )

    metadata = OpenLibraryLookup(client=api).by_isbn(ISBN)

    assert metadata is not None
    assert metadata.isbn == ISBN
    assert metadata.author == "Frank Herbert"
    assert metadata.page_count == 412
    assert metadata.genre == "Science Fiction, Deserts, Ecology"
    assert metadata.synopsis == "Set on the desert planet Arrakis."
    assert metadata.tags == ("Science Fiction", "Deserts", "Ecology", "Fiction general")
    assert (metadata.series_name, metadata.series_position) == ("Dune Chronicles", 1.0)


def test_by_isbn_without_work_falls_back_to_notes() -> None:
    api = FakeOpenLibrary(
        book_data={ISBN: BOOK_DATA},
        editions={"OL26242482M": _edition()},
        works={"/works/OL893415W": OpenLibraryAPIError("boom")},
    )

    metadata = OpenLibraryLookup(client=api).by_isbn(ISBN)

    assert metadata is not None
    assert metadata.synopsis == "Edition notes."
    assert metadata.series_name is None


def test_by_isbn_unknown() -> None:
    assert OpenLibraryLookup(client=FakeOpenLibrary()).by_isbn(ISBN) is None


def test_search_prefers_english_title_match() -> None:
    search = OpenLibrarySearch.model_validate(
        {
            "docs": [
                {"title": "Dune (French)", "language": ["fre"], "isbn": ["111"]},
                {"title": "The Dosadi Experiment", "language": ["eng"], "isbn": ["222"]},
                {
                    "key": "/works/OL893415W",
                    "title": "Dune",
                    "author_name": ["Frank Herbert"],
                    "isbn": ["333"],
                    "number_of_pages_median": 600,
                    "subject": ["series:dune_chronicles", "Fiction"],
                },
            ]
        }
    )
    work = OpenLibraryWork.model_validate({"title": "Dune", "description": "Arrakis."})
    api = FakeOpenLibrary(search_result=search, works={"/works/OL893415W": work})

    metadata = OpenLibraryLookup(client=api).search("Dune", "Frank Herbert")

    assert metadata is not None
    assert metadata.isbn == "333"
    assert metadata.page_count == 600
    assert metadata.synopsis == "Arrakis."
    assert metadata.series_name == "Dune Chronicles"


def test_search_without_english_docs() -> None:
    search = OpenLibrarySearch.model_validate({"docs": [{"title": "Dune", "language": ["ger"]}]})

    lookup = OpenLibraryLookup(client=FakeOpenLibrary(search_result=search))

    assert lookup.search("Dune", "") is None
