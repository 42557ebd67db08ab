"""Google Books ``/volumes`` response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GoogleBooksBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IndustryIdentifier(GoogleBooksBaseModel):
    type: str
    identifier: str


class VolumeSeriesRef(GoogleBooksBaseModel):
    series_id: str | None = Field(default=None, alias="seriesId")
    order_number: float | None = Field(default=None, alias="orderNumber")


class SeriesInfo(GoogleBooksBaseModel):
    short_series_book_title: str | None = Field(default=None, alias="shortSeriesBookTitle")
    book_display_number: str | None = Field(default=None, alias="bookDisplayNumber")
    volume_series: list[VolumeSeriesRef] = Field(default_factory=list, alias="volumeSeries")


class VolumeInfo(GoogleBooksBaseModel):
    title: str | None = None
    subtitle: str | None = None
    authors: list[str] = []
    page_count: int | None = Field(default=None, alias="pageCount")
    categories: list[str] = []
    description: str | None = None
    language: str | None = None
    industry_identifiers: list[IndustryIdentifier] = Field(
        default_factory=list, alias="industryIdentifiers"
    )
    series_info: SeriesInfo | None = Field(default=None, alias="seriesInfo")

    def isbn(self) -> str | None:
        """ISBN-13 when present, else ISBN-10."""

        by_type = {ident.type: ident.identifier for ident in self.industry_identifiers}
        return by_type.get("ISBN_13") or by_type.get("ISBN_10")


class Volume(GoogleBooksBaseModel):
    id: str | None = None
    volume_info: VolumeInfo = Field(default_factory=VolumeInfo, alias="volumeInfo")


class VolumeSearch(GoogleBooksBaseModel):
    total_items: int = Field(default=0, alias="totalItems")
    items: list[Volume] = []
