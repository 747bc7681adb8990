"""Configuration settings for KJV Reader."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    return Path(value).expanduser() if value else default


@dataclass
class Settings:
    """Application settings.

    Environment overrides:
        KJVREADER_DATA_ROOT: base directory for the local store
        KJVREADER_RESOURCES: directory holding per-edition resource folders
        KJVREADER_CATALOG_PATH: alternate editions catalog (YAML)
    """

    data_root: Path = field(
        default_factory=lambda: _env_path(
            "KJVREADER_DATA_ROOT", Path.home() / ".kjvreader"
        )
    )

    # Resource search root (None: data_root / "resources", then ./Resources)
    resources_root: Path | None = field(
        default_factory=lambda: (
            Path(os.environ["KJVREADER_RESOURCES"]).expanduser()
            if os.environ.get("KJVREADER_RESOURCES")
            else None
        )
    )

    catalog_path: Path | None = field(
        default_factory=lambda: (
            Path(os.environ["KJVREADER_CATALOG_PATH"]).expanduser()
            if os.environ.get("KJVREADER_CATALOG_PATH")
            else None
        )
    )

    # Search
    search_limit: int = 50

    # HTTP API
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def db_path(self) -> Path:
        """SQLite key/value store location."""
        return self.data_root / "kjvreader.db"
