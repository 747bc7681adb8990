"""Edition catalog loading and validation.

Loads editions_catalog.yaml, which ships inside the package. The edition set
is fixed at build time; KJVREADER_CATALOG_PATH may point at an alternate
catalog (tests, local experiments).

Catalog layout:
- editions: {id: {name, language, directory, books_file, modernize}}
- languages: {language: {old_testament: [...], new_testament: [...], apocrypha: [...]}}
- _default: edition id used when no selection is stored
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

PACKAGED_CATALOG = Path(__file__).resolve().parent / "editions_catalog.yaml"


class Language(Enum):
    """Languages with predefined book lists."""

    ENGLISH = "english"
    SPANISH = "spanish"


class Section(Enum):
    """The three book sections a language partitions its books into."""

    OLD_TESTAMENT = "old_testament"
    NEW_TESTAMENT = "new_testament"
    APOCRYPHA = "apocrypha"


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, message: str, edition_id: str | None = None):
        self.edition_id = edition_id
        full_message = f"[{edition_id}] {message}" if edition_id else message
        super().__init__(full_message)


class UnknownEditionError(KeyError):
    """Raised when an edition id is not in the catalog."""

    def __init__(self, edition_id: str, known: list[str] | None = None):
        self.edition_id = edition_id
        self.known = known or []
        super().__init__(edition_id)

    def __str__(self) -> str:
        if self.known:
            return f"Unknown edition '{self.edition_id}'. Known: {', '.join(self.known)}"
        return f"Unknown edition '{self.edition_id}'"


@dataclass(frozen=True)
class Edition:
    """A single scripture edition.

    Fields:
        id: Stable identifier (e.g., "KJV-1611"), also the cache key suffix
        display_name: Human-readable name
        language: Language of the text; selects the predefined book lists
        directory_name: Resource directory holding per-book JSON files
        books_file_name: Edition-specific books-index file in that directory
        supports_modernization: True if archaic-text modernization applies
    """

    id: str
    display_name: str
    language: Language
    directory_name: str
    books_file_name: str
    supports_modernization: bool = False

    @classmethod
    def from_dict(cls, edition_id: str, data: dict) -> "Edition":
        """Create Edition from catalog entry dict."""
        for required in ("name", "language", "directory", "books_file"):
            if not data.get(required):
                raise CatalogValidationError(
                    f"Missing required field: {required}", edition_id
                )

        try:
            language = Language(data["language"])
        except ValueError:
            valid = [lang.value for lang in Language]
            raise CatalogValidationError(
                f"Invalid language '{data['language']}'. Must be one of: {valid}",
                edition_id,
            )

        return cls(
            id=edition_id,
            display_name=data["name"],
            language=language,
            directory_name=data["directory"],
            books_file_name=data["books_file"],
            supports_modernization=bool(data.get("modernize", False)),
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "language": self.language.value,
            "directory_name": self.directory_name,
            "books_file_name": self.books_file_name,
            "supports_modernization": self.supports_modernization,
        }


@dataclass(frozen=True)
class BookSections:
    """Predefined, disjoint book-name lists for one language."""

    old_testament: tuple[str, ...]
    new_testament: tuple[str, ...]
    apocrypha: tuple[str, ...]

    @property
    def all_books(self) -> list[str]:
        """OT, NT and apocrypha concatenated in canonical order."""
        return [*self.old_testament, *self.new_testament, *self.apocrypha]

    def names(self, section: Section) -> tuple[str, ...]:
        return getattr(self, section.value)


@dataclass
class VersionCatalog:
    """Read-only edition metadata and predefined book lists.

    Enforces:
    - Every edition names a language with book lists
    - The three lists of a language do not overlap
    - The default edition exists
    """

    editions: dict[str, Edition] = field(default_factory=dict)
    sections: dict[Language, BookSections] = field(default_factory=dict)
    default_edition_id: str = ""
    path: Path | None = None

    @property
    def default_edition(self) -> Edition:
        return self.get(self.default_edition_id)

    def get(self, edition_id: str) -> Edition:
        """Get edition by id.

        Raises:
            UnknownEditionError: If edition_id is not in the catalog
        """
        try:
            return self.editions[edition_id]
        except KeyError:
            raise UnknownEditionError(edition_id, list(self.editions)) from None

    def resolve(self, edition: Edition | str | None) -> Edition:
        """Accept an Edition, an edition id or None (default edition)."""
        if edition is None:
            return self.default_edition
        if isinstance(edition, Edition):
            return edition
        return self.get(edition)

    def book_sections(self, language: Language) -> BookSections:
        return self.sections[language]

    def old_testament(self, language: Language) -> list[str]:
        return list(self.sections[language].old_testament)

    def new_testament(self, language: Language) -> list[str]:
        return list(self.sections[language].new_testament)

    def apocrypha(self, language: Language) -> list[str]:
        return list(self.sections[language].apocrypha)

    def predefined_books(self, language: Language) -> list[str]:
        """All predefined names for a language (OT + NT + apocrypha)."""
        return self.sections[language].all_books

    def get_old_testament_books(
        self, edition: Edition, loaded: list[str] | None = None
    ) -> list[str]:
        """Loaded OT books in loaded order, or the predefined list."""
        return self._section_view(edition, Section.OLD_TESTAMENT, loaded)

    def get_new_testament_books(
        self, edition: Edition, loaded: list[str] | None = None
    ) -> list[str]:
        """Loaded NT books in loaded order, or the predefined list."""
        return self._section_view(edition, Section.NEW_TESTAMENT, loaded)

    def get_apocrypha_books(
        self, edition: Edition, loaded: list[str] | None = None
    ) -> list[str]:
        """Loaded apocrypha in loaded order, or the predefined list.

        Any loaded book outside both testaments counts as apocrypha.
        """
        sections = self.sections[edition.language]
        if loaded:
            return [
                name
                for name in loaded
                if self.is_apocrypha(edition, name, loaded_names=loaded)
            ]
        return list(sections.apocrypha)

    def is_apocrypha(
        self, edition: Edition, name: str, loaded_names: list[str] | None = None
    ) -> bool:
        """Classify a book name as apocrypha.

        Predefined apocrypha is always apocrypha; predefined OT/NT never is.
        Anything else is apocrypha only if it exists in the loaded data.
        """
        sections = self.sections[edition.language]
        if name in sections.apocrypha:
            return True
        if name in sections.old_testament or name in sections.new_testament:
            return False
        return bool(loaded_names) and name in loaded_names

    def _section_view(
        self, edition: Edition, section: Section, loaded: list[str] | None
    ) -> list[str]:
        predefined = self.sections[edition.language].names(section)
        if loaded:
            return [name for name in loaded if name in predefined]
        return list(predefined)

    def validate(self) -> None:
        """Validate catalog consistency.

        Raises:
            CatalogValidationError: On the first problem found
        """
        if not self.editions:
            raise CatalogValidationError("Catalog defines no editions")

        for edition in self.editions.values():
            if edition.language not in self.sections:
                raise CatalogValidationError(
                    f"No book lists for language '{edition.language.value}'",
                    edition.id,
                )

        for language, sections in self.sections.items():
            ot, nt, ap = (
                set(sections.old_testament),
                set(sections.new_testament),
                set(sections.apocrypha),
            )
            overlap = (ot & nt) | (ot & ap) | (nt & ap)
            if overlap:
                raise CatalogValidationError(
                    f"Book lists for '{language.value}' overlap: {sorted(overlap)}"
                )

        if self.default_edition_id not in self.editions:
            raise CatalogValidationError(
                f"Default edition '{self.default_edition_id}' not defined"
            )

    @classmethod
    def load(cls, path: Path | str | None = None) -> "VersionCatalog":
        """Load catalog from YAML file.

        Args:
            path: Path to a catalog file. If None, uses:
                  1. KJVREADER_CATALOG_PATH env var
                  2. editions_catalog.yaml shipped with the package

        Returns:
            Loaded and validated VersionCatalog

        Raises:
            CatalogValidationError: If catalog is invalid
            FileNotFoundError: If catalog file not found
        """
        if path is None:
            env_path = os.environ.get("KJVREADER_CATALOG_PATH")
            path = Path(env_path) if env_path else PACKAGED_CATALOG

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)

        if not isinstance(raw_data, dict):
            raise CatalogValidationError("Catalog must be a YAML mapping")

        editions = {}
        for edition_id, value in (raw_data.get("editions") or {}).items():
            if not isinstance(value, dict):
                raise CatalogValidationError("Edition entry must be a mapping", edition_id)
            editions[edition_id] = Edition.from_dict(edition_id, value)

        sections = {}
        for language_name, lists in (raw_data.get("languages") or {}).items():
            try:
                language = Language(language_name)
            except ValueError:
                raise CatalogValidationError(f"Unknown language '{language_name}'")
            lists = lists or {}
            sections[language] = BookSections(
                old_testament=tuple(lists.get("old_testament") or ()),
                new_testament=tuple(lists.get("new_testament") or ()),
                apocrypha=tuple(lists.get("apocrypha") or ()),
            )

        default_id = raw_data.get("_default") or next(iter(editions), "")

        catalog = cls(
            editions=editions,
            sections=sections,
            default_edition_id=default_id,
            path=path,
        )
        catalog.validate()
        return catalog
