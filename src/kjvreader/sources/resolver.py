"""Path resolution for packaged edition resources.

Search order for an edition's resource directory:
1. Settings.resources_root (KJVREADER_RESOURCES env var)
2. {data_root}/resources
3. ./Resources (development checkouts)

Within each root the directory is {root}/{edition.directory_name}. A
directory only counts if it holds the edition's books-index file
(e.g. KJV-Books.json) or the generic Books.json.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from kjvreader.sources.catalog import Edition
from kjvreader.sources.editions import DEFAULT_INDEX_FILE

logger = logging.getLogger(__name__)


@dataclass
class ResolvedResource:
    """A located resource directory."""

    edition_id: str
    directory: Path
    index_file: Path


class ResourceResolver:
    """Resolves editions to resource directories on disk.

    Successful lookups are remembered per edition.
    """

    def __init__(
        self,
        resources_root: Path | str | None = None,
        data_root: Path | str | None = None,
        search_cwd: bool = True,
    ):
        """Initialize resolver.

        Args:
            resources_root: Explicit root holding edition directories
            data_root: Application data root (its resources/ is searched)
            search_cwd: Also search ./Resources
        """
        self._roots: list[Path] = []
        if resources_root:
            self._roots.append(Path(resources_root))
        if data_root:
            self._roots.append(Path(data_root) / "resources")
        if search_cwd:
            self._roots.append(Path.cwd() / "Resources")
        self._found: dict[str, ResolvedResource] = {}
        self._lock = threading.Lock()

    @property
    def roots(self) -> list[Path]:
        return list(self._roots)

    def candidate_directories(self, edition: Edition) -> list[Path]:
        """Ordered directories to check for an edition."""
        return [root / edition.directory_name for root in self._roots]

    def resolve(self, edition: Edition) -> ResolvedResource | None:
        """Find the resource directory for an edition, or None."""
        with self._lock:
            cached = self._found.get(edition.id)
        if cached is not None and cached.index_file.exists():
            return cached

        for directory in self.candidate_directories(edition):
            if not directory.is_dir():
                continue
            for index_name in (edition.books_file_name, DEFAULT_INDEX_FILE):
                index_file = directory / index_name
                if index_file.is_file():
                    resolved = ResolvedResource(
                        edition_id=edition.id,
                        directory=directory,
                        index_file=index_file,
                    )
                    with self._lock:
                        self._found[edition.id] = resolved
                    logger.debug(f"Found {index_name} for {edition.id} in {directory}")
                    return resolved

        logger.info(
            f"No resource directory for {edition.display_name} "
            f"(searched {len(self._roots)} roots)"
        )
        return None
