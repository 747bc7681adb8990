"""API route definitions."""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

try:
    from typing import Annotated, Literal
except ImportError:
    from typing_extensions import Annotated, Literal

# Keep typing imports in namespace for Pydantic annotation evaluation
__typing_imports__ = (List, Optional)

from kjvreader import __version__
from kjvreader.api.models import (
    BookInfoModel,
    BookListModel,
    EditionModel,
    HealthModel,
    NormalizeRequest,
    NormalizeResponse,
    SearchResponseModel,
    SearchResultModel,
    VerseModel,
)
from kjvreader.services import ReaderServices
from kjvreader.sources.catalog import Edition, UnknownEditionError

router = APIRouter()

# How long a request waits for an edition's first load
LOAD_TIMEOUT_SECONDS = 60.0


def get_services(request: Request) -> ReaderServices:
    return request.app.state.services


def _edition(services: ReaderServices, edition_id: Optional[str]) -> Edition:
    try:
        edition = services.catalog.resolve(edition_id) if edition_id else None
    except UnknownEditionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    edition = edition or services.repository.current_edition
    services.repository.ensure_loaded(edition, timeout=LOAD_TIMEOUT_SECONDS)
    return edition


@router.get("/health", response_model=HealthModel)
def health_check(services: ReaderServices = Depends(get_services)):
    """Health check endpoint."""
    store_connected = False
    try:
        services.store.keys()
        store_connected = True
    except sqlite3.Error:
        pass

    return HealthModel(
        status="ok" if store_connected else "degraded",
        version=__version__,
        store_connected=store_connected,
    )


@router.get("/editions", response_model=List[EditionModel])
def list_editions(services: ReaderServices = Depends(get_services)):
    """List supported editions."""
    repository = services.repository
    return [
        EditionModel(
            id=edition.id,
            display_name=edition.display_name,
            language=edition.language.value,
            supports_modernization=edition.supports_modernization,
            loaded=repository.is_loaded(edition),
            current=edition.id == repository.current_edition.id,
        )
        for edition in services.catalog.editions.values()
    ]


@router.get("/books", response_model=BookListModel)
def list_books(
    services: ReaderServices = Depends(get_services),
    edition: Annotated[Optional[str], Query(description="Edition id")] = None,
    section: Annotated[
        Optional[Literal["ot", "nt", "apocrypha"]],
        Query(description="Restrict to one section"),
    ] = None,
):
    """List book names in canonical order."""
    resolved = _edition(services, edition)
    repository = services.repository
    if section == "ot":
        books = repository.get_old_testament_books(resolved)
    elif section == "nt":
        books = repository.get_new_testament_books(resolved)
    elif section == "apocrypha":
        books = repository.get_apocrypha_books(resolved)
    else:
        books = repository.get_all_books(resolved)
    return BookListModel(edition=resolved.id, section=section, books=books)


@router.get("/books/{book}", response_model=BookInfoModel)
def get_book(
    book: str,
    services: ReaderServices = Depends(get_services),
    edition: Annotated[Optional[str], Query(description="Edition id")] = None,
):
    """Chapter and verse counts for one book."""
    resolved = _edition(services, edition)
    repository = services.repository
    book_data = repository.get_book(book, resolved)
    if book_data is None:
        raise HTTPException(status_code=404, detail=f"Book not found: {book}")

    return BookInfoModel(
        edition=resolved.id,
        id=book_data.id,
        name=book_data.name,
        apocrypha=repository.is_apocrypha_book(book_data.name, resolved),
        chapter_count=book_data.chapter_count,
        verse_counts=[
            book_data.verse_count(chapter) for chapter in sorted(book_data.chapters)
        ],
    )


@router.get("/verse", response_model=VerseModel)
def get_verse(
    book: Annotated[str, Query(description="Book name, e.g. 'Genesis'")],
    chapter: Annotated[int, Query(ge=1)],
    verse: Annotated[int, Query(ge=1)],
    services: ReaderServices = Depends(get_services),
    edition: Annotated[Optional[str], Query(description="Edition id")] = None,
    modern: Annotated[
        Optional[bool], Query(description="Override the modernization setting")
    ] = None,
):
    """
    Get verse text.

    Missing verses return the "Verse {n} text is not available." placeholder
    with available=false rather than an error.
    """
    resolved = _edition(services, edition)
    repository = services.repository
    available = repository.get_raw_verse(book, chapter, verse, resolved) is not None
    enabled = repository.use_modern_english if modern is None else modern

    return VerseModel(
        edition=resolved.id,
        book=book,
        chapter=chapter,
        verse=verse,
        text=repository.get_verse(book, chapter, verse, resolved, modern=modern),
        modernized=available and enabled and resolved.supports_modernization,
        available=available,
    )


@router.get("/search", response_model=SearchResponseModel)
def search_verses(
    q: Annotated[str, Query(min_length=1, description="Text to find")],
    services: ReaderServices = Depends(get_services),
    edition: Annotated[Optional[str], Query(description="Edition id")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    modern: Annotated[Optional[bool], Query()] = None,
):
    """Case-insensitive keyword search."""
    resolved = _edition(services, edition)
    results = services.search.search(q, resolved, limit=limit, modern=modern)
    return SearchResponseModel(
        edition=resolved.id,
        query=q,
        count=len(results),
        results=[SearchResultModel(**r.to_dict()) for r in results],
    )


@router.post("/normalize", response_model=NormalizeResponse)
def normalize_text(
    request: NormalizeRequest,
    services: ReaderServices = Depends(get_services),
):
    """Modernize arbitrary archaic English text."""
    return NormalizeResponse(
        text=request.text,
        normalized=services.normalizer.process_text(request.text, True),
    )
