"""Archaic English text modernization."""

from kjvreader.modernize.normalizer import (
    NormalizationRule,
    RuleKind,
    TextNormalizer,
    match_case,
)

__all__ = ["NormalizationRule", "RuleKind", "TextNormalizer", "match_case"]
