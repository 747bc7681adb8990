"""Per-book JSON loader for packaged edition resources.

An edition resource directory holds one JSON file per book plus a
books-index file (e.g. KJV-Books.json or Books.json). Book files look like:

{
    "book": "Genesis",
    "chapter-count": "50",
    "chapters": [
        {"chapter": 1, "verses": [{"verse": 1, "text": "In the beginning ..."}]}
    ]
}

A file that fails to parse is skipped; the rest of the directory still loads.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from kjvreader.sources.models import Book, Library, book_slug

logger = logging.getLogger(__name__)

DEFAULT_INDEX_FILE = "Books.json"


class BookParseError(Exception):
    """Raised when a single book file cannot be turned into a Book."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path.name}: {reason}")


class BookFileLoader:
    """Loads Book records from per-book JSON files."""

    def __init__(self, index_file_names: tuple[str, ...] = (DEFAULT_INDEX_FILE,)):
        """Initialize loader.

        Args:
            index_file_names: File names treated as books indexes (never parsed
                as books). Books.json is always included.
        """
        names = set(index_file_names) | {DEFAULT_INDEX_FILE}
        self._index_names = {name.lower() for name in names}

    def is_index_file(self, path: Path) -> bool:
        return path.name.lower() in self._index_names

    def load_file(self, path: Path) -> Book:
        """Parse one book file.

        Raises:
            BookParseError: If the file is unreadable, not JSON, or not shaped
                like a book (including gaps in chapter/verse numbering)
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise BookParseError(path, f"unreadable: {e}") from e

        if not isinstance(data, dict):
            raise BookParseError(path, "top level is not an object")

        name = data.get("book")
        if not isinstance(name, str) or not name.strip():
            raise BookParseError(path, "missing 'book' name")
        name = name.strip()

        raw_chapters = data.get("chapters")
        if not isinstance(raw_chapters, list) or not raw_chapters:
            raise BookParseError(path, "missing 'chapters' list")

        chapters: dict[int, dict[int, str]] = {}
        for raw_chapter in raw_chapters:
            number, verses = self._parse_chapter(path, raw_chapter)
            if number in chapters:
                raise BookParseError(path, f"duplicate chapter {number}")
            chapters[number] = verses

        _require_dense(path, chapters.keys(), "chapter")

        declared = data.get("chapter-count")
        if declared is not None and str(declared).strip() != str(len(chapters)):
            logger.debug(
                f"{path.name}: chapter-count {declared!r} differs from "
                f"{len(chapters)} parsed chapters"
            )

        return Book(id=book_slug(name), name=name, chapters=chapters)

    def _parse_chapter(self, path: Path, raw: object) -> tuple[int, dict[int, str]]:
        if not isinstance(raw, dict):
            raise BookParseError(path, "chapter entry is not an object")

        number = raw.get("chapter")
        if not _is_positive_int(number):
            raise BookParseError(path, f"invalid chapter number {number!r}")

        raw_verses = raw.get("verses")
        if not isinstance(raw_verses, list):
            raise BookParseError(path, f"chapter {number} has no 'verses' list")

        verses: dict[int, str] = {}
        for raw_verse in raw_verses:
            if not isinstance(raw_verse, dict):
                raise BookParseError(path, f"chapter {number}: verse is not an object")
            verse = raw_verse.get("verse")
            text = raw_verse.get("text")
            if not _is_positive_int(verse):
                raise BookParseError(
                    path, f"chapter {number}: invalid verse number {verse!r}"
                )
            if not isinstance(text, str):
                raise BookParseError(path, f"{number}:{verse} has no text")
            if verse in verses:
                raise BookParseError(path, f"duplicate verse {number}:{verse}")
            verses[verse] = text

        _require_dense(path, verses.keys(), f"chapter {number} verse")
        return number, verses

    def read_index(self, path: Path) -> list[str]:
        """Read book names from a books-index file.

        Accepts a list of names, a list of {"book"|"name": ...} objects, or an
        object with a "books" list. Anything else yields an empty list.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable books index {path.name}: {e}")
            return []

        if isinstance(data, dict):
            data = data.get("books", [])
        if not isinstance(data, list):
            return []

        names = []
        for entry in data:
            if isinstance(entry, str):
                names.append(entry)
            elif isinstance(entry, dict):
                name = entry.get("book") or entry.get("name")
                if isinstance(name, str):
                    names.append(name)
        return names

    def load_directory(
        self, directory: Path, canonical_order: list[str] | None = None
    ) -> Library:
        """Load every book file in a resource directory.

        Book order follows the books index when present, then
        canonical_order, then file name. Books that fail to parse are
        logged and left out.

        Args:
            directory: Edition resource directory
            canonical_order: Predefined book names for the edition's language

        Returns:
            Library (empty if nothing parsed)
        """
        files = sorted(
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == ".json"
        )

        index_order: list[str] = []
        books: dict[str, Book] = {}
        file_order: dict[str, int] = {}

        for position, path in enumerate(files):
            if self.is_index_file(path):
                index_order = index_order or self.read_index(path)
                continue
            try:
                book = self.load_file(path)
            except BookParseError as e:
                logger.warning(f"Skipping book file {e}")
                continue
            if book.name in books:
                logger.warning(f"Skipping {path.name}: duplicate book '{book.name}'")
                continue
            books[book.name] = book
            file_order[book.name] = position

        order = _order_books(
            list(books), index_order, canonical_order or [], file_order
        )
        logger.info(f"Parsed {len(books)} of {len(files)} files in {directory.name}")
        return Library(books=order, book_data=books, origin="resource")


def _order_books(
    names: list[str],
    index_order: list[str],
    canonical_order: list[str],
    file_order: dict[str, int],
) -> list[str]:
    index_rank = {name: i for i, name in enumerate(index_order)}
    canonical_rank = {name: i for i, name in enumerate(canonical_order)}
    unranked = len(index_order) + len(canonical_order)

    def key(name: str) -> tuple[int, int, int]:
        if name in index_rank:
            return (0, index_rank[name], 0)
        if name in canonical_rank:
            return (1, canonical_rank[name], 0)
        return (2, unranked, file_order.get(name, 0))

    return sorted(names, key=key)


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _require_dense(path: Path, numbers, label: str) -> None:
    """Chapter/verse numbers must run 1..n with no gaps."""
    ordered = sorted(numbers)
    if ordered != list(range(1, len(ordered) + 1)):
        raise BookParseError(path, f"{label} numbers are not contiguous from 1")
