"""In-memory scripture data model.

A Library is the fully loaded data for one edition: an ordered tuple of book
names plus a Book per name. Chapter and verse numbers are dense integer
ranges starting at 1.
"""

from __future__ import annotations

from dataclasses import dataclass, field


def book_slug(name: str) -> str:
    """Stable book id: lower-cased name with spaces as hyphens."""
    return name.lower().replace(" ", "-")


@dataclass(frozen=True)
class Book:
    """One book: chapter number -> verse number -> text."""

    id: str
    name: str
    chapters: dict[int, dict[int, str]] = field(default_factory=dict)

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)

    def verse_count(self, chapter: int) -> int:
        return len(self.chapters.get(chapter, {}))

    def verse(self, chapter: int, verse: int) -> str | None:
        return self.chapters.get(chapter, {}).get(verse)

    def iter_verses(self):
        """Yield (chapter, verse, text) in numeric order."""
        for chapter in sorted(self.chapters):
            verses = self.chapters[chapter]
            for verse in sorted(verses):
                yield chapter, verse, verses[verse]

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict (integer keys become strings)."""
        return {
            "id": self.id,
            "name": self.name,
            "chapters": {
                str(chapter): {str(verse): text for verse, text in verses.items()}
                for chapter, verses in self.chapters.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Book":
        chapters = {
            int(chapter): {int(verse): text for verse, text in verses.items()}
            for chapter, verses in data.get("chapters", {}).items()
        }
        name = data["name"]
        return cls(id=data.get("id") or book_slug(name), name=name, chapters=chapters)


@dataclass(frozen=True)
class Library:
    """Loaded data for one edition.

    Published libraries are shared between threads and must not be mutated.
    books is stored as a tuple; book_data and the chapter dicts are read-only
    by convention.

    Fields:
        books: Book names in canonical (load) order
        book_data: Book name -> Book
        origin: Where the data came from ("cache", "resource", "fallback")
    """

    books: tuple[str, ...] = ()
    book_data: dict[str, Book] = field(default_factory=dict)
    origin: str = ""

    def __post_init__(self):
        object.__setattr__(self, "books", tuple(self.books))

    def get(self, name: str) -> Book | None:
        return self.book_data.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.book_data

    def __len__(self) -> int:
        return len(self.books)

    @property
    def is_empty(self) -> bool:
        return not self.book_data

    @property
    def is_fallback(self) -> bool:
        return self.origin == "fallback"

    @property
    def verse_total(self) -> int:
        return sum(
            len(verses)
            for book in self.book_data.values()
            for verses in book.chapters.values()
        )

    def to_dict(self) -> dict:
        """Serialize for the local cache. origin is not persisted."""
        return {
            "books": list(self.books),
            "bookData": {name: book.to_dict() for name, book in self.book_data.items()},
        }

    @classmethod
    def from_dict(cls, data: dict, origin: str = "") -> "Library":
        book_data = {
            name: Book.from_dict(book) for name, book in data.get("bookData", {}).items()
        }
        return cls(books=tuple(data.get("books", ())), book_data=book_data, origin=origin)

    def same_content(self, other: "Library") -> bool:
        """True if both hold the same books and verse texts, ignoring origin."""
        return self.books == other.books and self.book_data == other.book_data
