"""KJV Reader - scripture reading library with archaic-text modernization."""

__version__ = "0.1.0"
