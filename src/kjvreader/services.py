"""Composition root: builds the reader's service objects from Settings.

One ReaderServices instance lives for the duration of a process (a CLI
invocation, an API server) and is handed to consumers explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass

from kjvreader.bookmarks import BookmarkStore
from kjvreader.config import Settings
from kjvreader.db.store import KeyValueStore
from kjvreader.modernize import TextNormalizer
from kjvreader.preferences import PreferenceStore
from kjvreader.search import VerseSearch
from kjvreader.sources.cache import LibraryCache
from kjvreader.sources.catalog import VersionCatalog
from kjvreader.sources.repository import ResourceLibrarySource, ScriptureRepository
from kjvreader.sources.resolver import ResourceResolver


@dataclass
class ReaderServices:
    settings: Settings
    catalog: VersionCatalog
    store: KeyValueStore
    preferences: PreferenceStore
    bookmarks: BookmarkStore
    repository: ScriptureRepository
    search: VerseSearch

    @property
    def normalizer(self) -> TextNormalizer:
        return self.repository.normalizer

    def close(self) -> None:
        self.repository.close()


def build_services(
    settings: Settings | None = None, edition: str | None = None
) -> ReaderServices:
    """Wire catalog, store, repository and collaborators together.

    Args:
        settings: Paths and limits (default: Settings())
        edition: Edition id to read from instead of the stored selection;
            not persisted
    """
    settings = settings or Settings()
    catalog = VersionCatalog.load(settings.catalog_path)
    store = KeyValueStore(settings.db_path)
    preferences = PreferenceStore(store, catalog)
    resolver = ResourceResolver(
        resources_root=settings.resources_root,
        data_root=settings.data_root,
    )
    repository = ScriptureRepository(
        catalog=catalog,
        source=ResourceLibrarySource(resolver, catalog),
        cache=LibraryCache(store),
        normalizer=TextNormalizer(),
        preferences=preferences,
        edition=edition,
    )
    return ReaderServices(
        settings=settings,
        catalog=catalog,
        store=store,
        preferences=preferences,
        bookmarks=BookmarkStore(store),
        repository=repository,
        search=VerseSearch(repository),
    )
