"""Scripture repository: edition loading, caching and verse lookup.

Load resolution for an edition (first success wins):
1. Local cache entry (cachedBibleData-{edition id})
2. Packaged resource directory of per-book JSON files
3. Synthesized fallback: one stub verse per predefined book name

Loads run on a single background worker. Each edition has one load future;
starting a load and joining one already in flight is a single locked
operation. Readers never block on a load: until the library is published
they see the predefined book lists, zero counts and the placeholder verse.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from kjvreader.modernize import TextNormalizer
from kjvreader.sources.cache import LibraryCache
from kjvreader.sources.catalog import Edition, VersionCatalog
from kjvreader.sources.editions import BookFileLoader
from kjvreader.sources.models import Book, Library, book_slug
from kjvreader.sources.resolver import ResourceResolver

if TYPE_CHECKING:
    from kjvreader.preferences import PreferenceStore

logger = logging.getLogger(__name__)

MISSING_VERSE_TEMPLATE = "Verse {verse} text is not available."
FALLBACK_VERSE_TEMPLATE = "Sample verse text for {book} chapter 1, verse 1."


def missing_verse_text(verse: int) -> str:
    return MISSING_VERSE_TEMPLATE.format(verse=verse)


@runtime_checkable
class LibrarySource(Protocol):
    """Raw source of edition data (step 2 of the load order)."""

    def load_library(self, edition: Edition) -> Library | None:
        """Return the parsed library, or None if this source has no data."""
        ...


class ResourceLibrarySource(LibrarySource):
    """Loads an edition from its packaged resource directory."""

    def __init__(self, resolver: ResourceResolver, catalog: VersionCatalog):
        self._resolver = resolver
        self._catalog = catalog

    def load_library(self, edition: Edition) -> Library | None:
        resolved = self._resolver.resolve(edition)
        if resolved is None:
            return None

        loader = BookFileLoader(index_file_names=(edition.books_file_name,))
        library = loader.load_directory(
            resolved.directory,
            canonical_order=self._catalog.predefined_books(edition.language),
        )
        if library.is_empty:
            logger.warning(f"No parsable books in {resolved.directory}")
            return None
        return library


def build_fallback_library(catalog: VersionCatalog, edition: Edition) -> Library:
    """One single-verse stub book per predefined name. Cannot fail."""
    names = catalog.predefined_books(edition.language)
    book_data = {
        name: Book(
            id=book_slug(name),
            name=name,
            chapters={1: {1: FALLBACK_VERSE_TEMPLATE.format(book=name)}},
        )
        for name in names
    }
    return Library(books=names, book_data=book_data, origin="fallback")


class ScriptureRepository:
    """Resolves (edition, book, chapter, verse) to text.

    Absent data is never an error: lookups return None, 0, the predefined
    book lists, or the "Verse {n} text is not available." placeholder.

    All lookup methods take an optional edition (Edition or id); None means
    the current edition.
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        source: LibrarySource,
        cache: LibraryCache | None = None,
        normalizer: TextNormalizer | None = None,
        preferences: "PreferenceStore | None" = None,
        edition: Edition | str | None = None,
    ):
        """Initialize repository.

        Args:
            catalog: Edition metadata and predefined book lists
            source: Raw library source (packaged resources in production)
            cache: Persisted library cache; None disables caching
            normalizer: Archaic text normalizer (default rule set if None)
            preferences: Stores the modernization flag and selected edition
            edition: Initial edition (default: stored selection or catalog default)
        """
        self._catalog = catalog
        self._source = source
        self._cache = cache
        self._normalizer = normalizer or TextNormalizer()
        self._preferences = preferences

        self._lock = threading.Lock()
        self._libraries: dict[str, Library] = {}
        self._loads: dict[str, Future] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="library-loader"
        )

        if edition is not None:
            self._current = catalog.resolve(edition)
        elif preferences is not None:
            self._current = preferences.selected_edition
        else:
            self._current = catalog.default_edition

        self._use_modern_english = (
            preferences.use_modern_english if preferences is not None else False
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> "ScriptureRepository":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        """Stop the loader worker after any in-flight load finishes."""
        self._executor.shutdown(wait=True)

    @property
    def catalog(self) -> VersionCatalog:
        return self._catalog

    @property
    def normalizer(self) -> TextNormalizer:
        return self._normalizer

    @property
    def current_edition(self) -> Edition:
        return self._current

    @property
    def use_modern_english(self) -> bool:
        return self._use_modern_english

    @use_modern_english.setter
    def use_modern_english(self, enabled: bool) -> None:
        self._use_modern_english = bool(enabled)
        if self._preferences is not None:
            self._preferences.use_modern_english = self._use_modern_english

    def switch_edition(self, edition: Edition | str) -> Edition:
        """Make edition current, starting its load if it is not resident."""
        edition = self._catalog.resolve(edition)
        if not self.is_loaded(edition):
            self.load(edition)
        self._current = edition
        if self._preferences is not None:
            self._preferences.selected_edition = edition
        logger.info(f"Switched to {edition.display_name}")
        return edition

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, edition: Edition | str | None = None) -> "Future[Library]":
        """Start the load for an edition, or join the one already started.

        Returns a future resolving to the published Library. A completed
        load is never repeated; use reload() for that. A load that failed
        is started again only from here or reload(), never from a lookup.
        """
        return self._start_or_join(self._resolve(edition), restart_failed=True)

    def ensure_loaded(
        self, edition: Edition | str | None = None, timeout: float | None = None
    ) -> Library:
        """Block until the edition's library is published and return it."""
        return self.load(edition).result(timeout=timeout)

    def reload(self, edition: Edition | str | None = None) -> "Future[Library]":
        """Drop the cached and resident library and load it again.

        A load already in flight cannot be cancelled; it is joined instead.
        The new load skips the cache, so a reader that starts a load while
        the entry is being invalidated cannot hand back the old data.
        """
        edition = self._resolve(edition)
        with self._lock:
            future = self._loads.get(edition.id)
            if future is not None and not future.done():
                logger.info(f"Load for {edition.id} already in flight; joining it")
                return future

        if self._cache is not None:
            self._cache.invalidate(edition.id)

        # Loads run one at a time in submission order, so this one publishes last.
        with self._lock:
            self._libraries.pop(edition.id, None)
            return self._submit(edition, use_cache=False)

    def is_loaded(self, edition: Edition | str | None = None) -> bool:
        edition = self._resolve(edition)
        with self._lock:
            return edition.id in self._libraries

    def is_loading(self, edition: Edition | str | None = None) -> bool:
        edition = self._resolve(edition)
        with self._lock:
            future = self._loads.get(edition.id)
            return future is not None and not future.done()

    def _start_or_join(self, edition: Edition, restart_failed: bool) -> "Future[Library]":
        with self._lock:
            future = self._loads.get(edition.id)
            if future is None:
                return self._submit(edition)
            failed = (
                future.done()
                and future.exception() is not None
                and edition.id not in self._libraries
            )
            if failed and restart_failed:
                logger.info(f"Retrying failed load for {edition.id}")
                return self._submit(edition)
            return future

    def _submit(self, edition: Edition, use_cache: bool = True) -> "Future[Library]":
        # Caller holds self._lock.
        future = self._executor.submit(self._perform_load, edition, use_cache)
        self._loads[edition.id] = future
        logger.debug(f"Queued load for {edition.id}")
        return future

    def _perform_load(self, edition: Edition, use_cache: bool = True) -> Library:
        logger.info(f"Loading {edition.display_name}...")

        library = self._load_from_cache(edition) if use_cache else None
        if library is None:
            library = self._load_from_source(edition)
            if library is not None:
                self._save_to_cache(edition, library)
        if library is None:
            library = build_fallback_library(self._catalog, edition)
            logger.warning(
                f"No data for {edition.display_name}; "
                f"using {len(library)} placeholder books"
            )

        with self._lock:
            self._libraries[edition.id] = library
        logger.info(
            f"Loaded {len(library)} books for {edition.display_name} "
            f"from {library.origin}"
        )
        return library

    def _load_from_cache(self, edition: Edition) -> Library | None:
        if self._cache is None:
            return None
        try:
            return self._cache.load(edition.id)
        except sqlite3.Error as e:
            logger.warning(f"Cache read failed for {edition.id}: {e}")
            return None

    def _load_from_source(self, edition: Edition) -> Library | None:
        try:
            return self._source.load_library(edition)
        except Exception as e:
            logger.warning(f"Reading resources for {edition.id} failed: {e!r}")
            return None

    def _save_to_cache(self, edition: Edition, library: Library) -> None:
        if self._cache is None:
            return
        try:
            self._cache.save(edition.id, library)
        except sqlite3.Error as e:
            logger.warning(f"Could not cache {edition.id}: {e}")

    def _resolve(self, edition: Edition | str | None) -> Edition:
        if edition is None:
            return self._current
        return self._catalog.resolve(edition)

    def _library(self, edition: Edition) -> Library | None:
        """Published library, triggering a load if none was ever started."""
        with self._lock:
            library = self._libraries.get(edition.id)
        if library is None:
            self._start_or_join(edition, restart_failed=False)
        return library

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_library(self, edition: Edition | str | None = None) -> Library | None:
        """Published library for an edition, or None while not loaded."""
        return self._library(self._resolve(edition))

    def get_book(self, name: str, edition: Edition | str | None = None) -> Book | None:
        library = self._library(self._resolve(edition))
        if library is None:
            return None
        return library.get(name)

    def get_raw_verse(
        self,
        book: str,
        chapter: int,
        verse: int,
        edition: Edition | str | None = None,
    ) -> str | None:
        """Verse text exactly as loaded, or None."""
        book_data = self.get_book(book, edition)
        if book_data is None:
            return None
        return book_data.verse(chapter, verse)

    def get_verse(
        self,
        book: str,
        chapter: int,
        verse: int,
        edition: Edition | str | None = None,
        modern: bool | None = None,
    ) -> str:
        """Verse text, modernized when enabled for an edition that supports it.

        Args:
            modern: Override the repository's modernization flag for this call
        """
        edition = self._resolve(edition)
        text = self.get_raw_verse(book, chapter, verse, edition)
        if text is None:
            return missing_verse_text(verse)
        return self.present(text, edition, modern)

    def present(
        self, text: str, edition: Edition | str | None = None, modern: bool | None = None
    ) -> str:
        """Apply modernization policy to raw text from an edition."""
        edition = self._resolve(edition)
        enabled = self._use_modern_english if modern is None else modern
        if not edition.supports_modernization:
            return text
        return self._normalizer.process_text(text, enabled)

    def get_all_books(self, edition: Edition | str | None = None) -> list[str]:
        edition = self._resolve(edition)
        library = self._library(edition)
        if library is not None and library.books:
            return list(library.books)
        return self._catalog.predefined_books(edition.language)

    def get_old_testament_books(self, edition: Edition | str | None = None) -> list[str]:
        edition = self._resolve(edition)
        return self._catalog.get_old_testament_books(edition, self._loaded_names(edition))

    def get_new_testament_books(self, edition: Edition | str | None = None) -> list[str]:
        edition = self._resolve(edition)
        return self._catalog.get_new_testament_books(edition, self._loaded_names(edition))

    def get_apocrypha_books(self, edition: Edition | str | None = None) -> list[str]:
        edition = self._resolve(edition)
        return self._catalog.get_apocrypha_books(edition, self._loaded_names(edition))

    def is_apocrypha_book(self, book: str, edition: Edition | str | None = None) -> bool:
        edition = self._resolve(edition)
        return self._catalog.is_apocrypha(edition, book, self._loaded_names(edition))

    def get_chapter_count(self, book: str, edition: Edition | str | None = None) -> int:
        book_data = self.get_book(book, edition)
        return book_data.chapter_count if book_data else 0

    def get_verse_count(
        self, book: str, chapter: int, edition: Edition | str | None = None
    ) -> int:
        book_data = self.get_book(book, edition)
        return book_data.verse_count(chapter) if book_data else 0

    def _loaded_names(self, edition: Edition) -> list[str] | None:
        library = self._library(edition)
        if library is None or not library.books:
            return None
        return list(library.books)

    def status(self) -> list[dict]:
        """Per-edition load state and section counts."""
        rows = []
        for edition in self._catalog.editions.values():
            with self._lock:
                library = self._libraries.get(edition.id)
                future = self._loads.get(edition.id)
            names = list(library.books) if library and library.books else None
            rows.append(
                {
                    "edition": edition.id,
                    "name": edition.display_name,
                    "current": edition.id == self._current.id,
                    "loaded": library is not None,
                    "loading": future is not None and not future.done(),
                    "origin": library.origin if library else "",
                    "total": len(names) if names else 0,
                    "old_testament": len(
                        self._catalog.get_old_testament_books(edition, names)
                    )
                    if names
                    else 0,
                    "new_testament": len(
                        self._catalog.get_new_testament_books(edition, names)
                    )
                    if names
                    else 0,
                    "apocrypha": len(self._catalog.get_apocrypha_books(edition, names))
                    if names
                    else 0,
                    "verses": library.verse_total if library else 0,
                }
            )
        return rows
