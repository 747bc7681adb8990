"""Edition data: catalog, resource loading, cache and repository.

- catalog.py: Load and validate editions_catalog.yaml
- editions.py: Per-book JSON loader
- resolver.py: Locate edition resource directories
- cache.py: Persisted library cache
- repository.py: Load protocol and verse lookup
"""

from kjvreader.sources.catalog import (
    BookSections,
    CatalogValidationError,
    Edition,
    Language,
    Section,
    UnknownEditionError,
    VersionCatalog,
)
from kjvreader.sources.editions import BookFileLoader, BookParseError
from kjvreader.sources.models import Book, Library
from kjvreader.sources.resolver import ResourceResolver
from kjvreader.sources.cache import LibraryCache
from kjvreader.sources.repository import (
    LibrarySource,
    ResourceLibrarySource,
    ScriptureRepository,
)

__all__ = [
    "BookSections",
    "CatalogValidationError",
    "Edition",
    "Language",
    "Section",
    "UnknownEditionError",
    "VersionCatalog",
    "BookFileLoader",
    "BookParseError",
    "Book",
    "Library",
    "ResourceResolver",
    "LibraryCache",
    "LibrarySource",
    "ResourceLibrarySource",
    "ScriptureRepository",
]
