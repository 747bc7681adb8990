"""Shared fixtures for reader tests."""

from __future__ import annotations

import shutil
import threading
from pathlib import Path

import pytest

from kjvreader.db.store import KeyValueStore
from kjvreader.sources.cache import LibraryCache
from kjvreader.sources.catalog import Edition, VersionCatalog
from kjvreader.sources.models import Library
from kjvreader.sources.repository import ResourceLibrarySource, ScriptureRepository
from kjvreader.sources.resolver import ResourceResolver

FIXTURES_DIR = Path(__file__).parent / "fixtures"
RESOURCES_FIXTURE = FIXTURES_DIR / "resources"

# Upper bound for any single load in tests
LOAD_TIMEOUT = 10.0


class CountingSource:
    """Test double for the raw library source.

    Counts load_library calls and can hold each call until released.
    """

    def __init__(
        self,
        libraries: dict[str, Library] | None = None,
        gate: threading.Event | None = None,
        error: Exception | None = None,
    ):
        self.libraries = libraries or {}
        self.gate = gate
        self.error = error
        self.calls: list[str] = []
        self.started = threading.Event()
        self._lock = threading.Lock()

    def load_library(self, edition: Edition) -> Library | None:
        with self._lock:
            self.calls.append(edition.id)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(LOAD_TIMEOUT)
        if self.error is not None:
            raise self.error
        return self.libraries.get(edition.id)


@pytest.fixture
def counting_source():
    """Factory for CountingSource test doubles."""
    return CountingSource


@pytest.fixture
def catalog() -> VersionCatalog:
    return VersionCatalog.load()


@pytest.fixture
def kjv(catalog) -> Edition:
    return catalog.get("KJV-1611")


@pytest.fixture
def rv(catalog) -> Edition:
    return catalog.get("RV-1602")


@pytest.fixture
def resources_root(tmp_path) -> Path:
    """Writable copy of the fixture resource tree."""
    root = tmp_path / "resources"
    shutil.copytree(RESOURCES_FIXTURE, root)
    return root


@pytest.fixture
def store(tmp_path) -> KeyValueStore:
    return KeyValueStore(tmp_path / "data" / "kjvreader.db")


@pytest.fixture
def resource_source(resources_root, catalog) -> ResourceLibrarySource:
    resolver = ResourceResolver(resources_root=resources_root, search_cwd=False)
    return ResourceLibrarySource(resolver, catalog)


@pytest.fixture
def repository(catalog, resource_source, store):
    """Repository over the fixture resources with a live cache."""
    repo = ScriptureRepository(
        catalog=catalog,
        source=resource_source,
        cache=LibraryCache(store),
    )
    yield repo
    repo.close()


@pytest.fixture
def loaded_repository(repository, load_timeout):
    repository.ensure_loaded(timeout=load_timeout)
    return repository


@pytest.fixture
def load_timeout() -> float:
    return LOAD_TIMEOUT
