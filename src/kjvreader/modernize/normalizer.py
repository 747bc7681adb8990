"""Rule-based archaic text normalizer.

Rewrites obsolete spellings and words into modern forms:
- Spelling-pattern rules match case-insensitively anywhere in the text
- Word rules match case-insensitively on whole words only
- The case of the first matched character carries over to the replacement

Each rule makes exactly one pass per call. Output of one rule can be matched
by a later rule in the same call, but never by an earlier one, so
normalize() is not idempotent in general.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from kjvreader.modernize.rules import ARCHAIC_SPELLING_PATTERNS, ARCHAIC_WORDS

# A "letter" is any word character that is not a digit or underscore
_NOT_AFTER_LETTER = r"(?<![^\W\d_])"
_NOT_BEFORE_LETTER = r"(?![^\W\d_])"


class RuleKind(Enum):
    """How a rule's archaic text is matched."""

    PATTERN = "pattern"  # substring, may sit inside a longer word
    WORD = "word"  # whole word, no letter on either side


@dataclass(frozen=True)
class NormalizationRule:
    """A single archaic -> modern substitution."""

    kind: RuleKind
    archaic: str
    modern: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.archaic:
            raise ValueError("Normalization rule needs a non-empty archaic form")
        pattern = re.escape(self.archaic)
        if self.kind == RuleKind.WORD:
            pattern = f"{_NOT_AFTER_LETTER}{pattern}{_NOT_BEFORE_LETTER}"
        object.__setattr__(self, "regex", re.compile(pattern, re.IGNORECASE))

    def apply(self, text: str) -> str:
        """Replace every match in a single pass.

        Match positions are all taken from the input string, so a replacement
        never shifts or re-triggers another match of the same rule.
        """
        return self.regex.sub(lambda m: match_case(m.group(0), self.modern), text)


def match_case(matched: str, replacement: str) -> str:
    """Upper-case the replacement's first character if the match starts uppercase."""
    if matched[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def pattern_rules(pairs: Iterable[tuple[str, str]]) -> list[NormalizationRule]:
    """Build spelling-pattern rules, dropping repeated archaic forms."""
    return _build(RuleKind.PATTERN, pairs)


def word_rules(pairs: Iterable[tuple[str, str]]) -> list[NormalizationRule]:
    """Build whole-word rules, dropping repeated archaic forms."""
    return _build(RuleKind.WORD, pairs)


def _build(kind: RuleKind, pairs: Iterable[tuple[str, str]]) -> list[NormalizationRule]:
    seen: set[str] = set()
    rules = []
    for archaic, modern in pairs:
        if archaic in seen:
            continue
        seen.add(archaic)
        rules.append(NormalizationRule(kind, archaic, modern))
    return rules


class TextNormalizer:
    """Applies ordered pattern rules, then ordered word rules.

    Instances are immutable once built and safe to share between threads.

    Example:
        >>> TextNormalizer().normalize("Thou art in heauen")
        'You are in heaven'
    """

    def __init__(
        self,
        patterns: Iterable[tuple[str, str]] | None = None,
        words: Iterable[tuple[str, str]] | None = None,
    ):
        """Initialize normalizer.

        Args:
            patterns: (archaic, modern) spelling fragments, in application order.
                Defaults to ARCHAIC_SPELLING_PATTERNS.
            words: (archaic, modern) whole words, in application order.
                Defaults to ARCHAIC_WORDS.
        """
        self._rules: tuple[NormalizationRule, ...] = tuple(
            pattern_rules(ARCHAIC_SPELLING_PATTERNS if patterns is None else patterns)
            + word_rules(ARCHAIC_WORDS if words is None else words)
        )

    @property
    def rules(self) -> tuple[NormalizationRule, ...]:
        """All rules in application order (patterns first)."""
        return self._rules

    def normalize(self, text: str) -> str:
        """Return the modernized form of text."""
        for rule in self._rules:
            if not text:
                break
            text = rule.apply(text)
        return text

    def process_text(self, text: str, enabled: bool) -> str:
        """Modernize text when enabled, otherwise return it unchanged."""
        if not enabled:
            return text
        return self.normalize(text)
