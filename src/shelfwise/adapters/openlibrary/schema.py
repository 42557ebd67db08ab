"""OpenLibrary response schemas (books API, search and works)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OpenLibraryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OpenLibraryNamed(OpenLibraryBaseModel):
    name: str
    url: str | None = None


class OpenLibraryText(OpenLibraryBaseModel):
    """Typed text blocks (``{"type": "/type/text", "value": ...}``)."""

    value: str = ""


class OpenLibraryExcerpt(OpenLibraryBaseModel):
    text: str = ""


class OpenLibraryKey(OpenLibraryBaseModel):
    key: str


class OpenLibraryBookData(OpenLibraryBaseModel):
    """One entry of ``/api/books?jscmd=data``."""

    title: str = ""
    url: str | None = None
    authors: list[OpenLibraryNamed] = []
    number_of_pages: int | None = None
    subjects: list[OpenLibraryNamed] = []
    notes: str | OpenLibraryText | None = None
    excerpts: list[OpenLibraryExcerpt] = []

    @property
    def author_names(self) -> list[str]:
        return [author.name for author in self.authors if author.name]

    @property
    def subject_names(self) -> list[str]:
        return [subject.name for subject in self.subjects if subject.name]


class OpenLibraryEdition(OpenLibraryBaseModel):
    key: str | None = None
    works: list[OpenLibraryKey] = []


class OpenLibraryWork(OpenLibraryBaseModel):
    key: str | None = None
    title: str | None = None
    description: str | OpenLibraryText | None = None
    series: list[str] = []
    subjects: list[str] = []


class OpenLibrarySearchDoc(OpenLibraryBaseModel):
    key: str | None = None
    title: str | None = None
    author_name: list[str] = []
    isbn: list[str] = []
    number_of_pages_median: int | None = None
    subject: list[str] = []
    language: list[str] | None = None


class OpenLibrarySearch(OpenLibraryBaseModel):
    num_found: int = 0
    docs: list[OpenLibrarySearchDoc] = []
