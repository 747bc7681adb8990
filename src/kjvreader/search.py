"""Keyword search over a loaded edition."""

from __future__ import annotations

from dataclasses import dataclass

from kjvreader.sources.catalog import Edition
from kjvreader.sources.repository import ScriptureRepository

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class SearchResult:
    book: str
    chapter: int
    verse: int
    text: str

    @property
    def reference(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"

    def to_dict(self) -> dict:
        return {
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "reference": self.reference,
            "text": self.text,
        }


class VerseSearch:
    """Case-insensitive substring search over verse text.

    Matches against the text as loaded; results carry the text as the
    repository presents it (modernized when enabled).
    """

    def __init__(self, repository: ScriptureRepository):
        self._repository = repository

    def search(
        self,
        query: str,
        edition: Edition | str | None = None,
        limit: int = DEFAULT_LIMIT,
        modern: bool | None = None,
    ) -> list[SearchResult]:
        needle = query.strip().casefold()
        if not needle or limit <= 0:
            return []

        repository = self._repository
        library = repository.get_library(edition)
        if library is None:
            return []

        results: list[SearchResult] = []
        for name in library.books:
            book = library.get(name)
            if book is None:
                continue
            for chapter, verse, text in book.iter_verses():
                if needle in text.casefold():
                    results.append(
                        SearchResult(
                            book=name,
                            chapter=chapter,
                            verse=verse,
                            text=repository.present(text, edition, modern),
                        )
                    )
                    if len(results) >= limit:
                        return results
        return results
