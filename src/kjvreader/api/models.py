"""Pydantic models for API."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class HealthModel(BaseModel):
    status: str
    version: str
    store_connected: bool


class EditionModel(BaseModel):
    """A supported scripture edition."""

    id: str = Field(..., description="Edition identifier, e.g. KJV-1611")
    display_name: str
    language: str
    supports_modernization: bool
    loaded: bool = Field(False, description="Library resident in memory")
    current: bool = Field(False, description="Currently selected edition")


class BookListModel(BaseModel):
    edition: str
    section: Optional[str] = Field(None, description="ot, nt, apocrypha or None")
    books: List[str]


class BookInfoModel(BaseModel):
    """Chapter and verse counts for a book."""

    edition: str
    id: str
    name: str
    apocrypha: bool
    chapter_count: int
    verse_counts: List[int] = Field(
        ..., description="Verse count per chapter, chapter 1 first"
    )


class VerseModel(BaseModel):
    edition: str
    book: str
    chapter: int
    verse: int
    text: str
    modernized: bool
    available: bool = Field(..., description="False when the placeholder was returned")


class SearchResultModel(BaseModel):
    book: str
    chapter: int
    verse: int
    reference: str
    text: str


class SearchResponseModel(BaseModel):
    edition: str
    query: str
    count: int
    results: List[SearchResultModel]


class NormalizeRequest(BaseModel):
    text: str = Field(..., description="Archaic English text")


class NormalizeResponse(BaseModel):
    text: str
    normalized: str
