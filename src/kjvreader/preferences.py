"""User preference flags persisted in the key/value store."""

from __future__ import annotations

import logging

from kjvreader.db.store import KeyValueStore
from kjvreader.sources.catalog import Edition, UnknownEditionError, VersionCatalog

logger = logging.getLogger(__name__)

MODERN_ENGLISH_KEY = "useModernEnglish"
SELECTED_EDITION_KEY = "selectedBibleVersion"


class PreferenceStore:
    """Modernization toggle and selected edition."""

    def __init__(self, store: KeyValueStore, catalog: VersionCatalog):
        self._store = store
        self._catalog = catalog

    @property
    def use_modern_english(self) -> bool:
        return bool(self._store.get_json(MODERN_ENGLISH_KEY, False))

    @use_modern_english.setter
    def use_modern_english(self, enabled: bool) -> None:
        self._store.set_json(MODERN_ENGLISH_KEY, bool(enabled))

    def toggle_modern_english(self) -> bool:
        """Flip the modernization flag and return the new value."""
        enabled = not self.use_modern_english
        self.use_modern_english = enabled
        return enabled

    @property
    def selected_edition(self) -> Edition:
        """Stored edition, or the catalog default if none/unknown is stored."""
        edition_id = self._store.get_json(SELECTED_EDITION_KEY)
        if isinstance(edition_id, str):
            try:
                return self._catalog.get(edition_id)
            except UnknownEditionError:
                logger.warning(f"Stored edition '{edition_id}' no longer exists")
        return self._catalog.default_edition

    @selected_edition.setter
    def selected_edition(self, edition: Edition | str) -> None:
        edition = self._catalog.resolve(edition)
        self._store.set_json(SELECTED_EDITION_KEY, edition.id)

    def to_dict(self) -> dict:
        return {
            "use_modern_english": self.use_modern_english,
            "selected_edition": self.selected_edition.id,
        }
