"""Text cleaning utilities for question deduplication"""

import re
import logging
from typing import Any

logger = logging.getLogger(__name__)

# "(Variante 2)", "(variante)" anywhere in the text
_PARENTHESIZED_VARIANT_RE = re.compile(r'\(Variante\s*\d*\)', re.IGNORECASE)
# "Variante 1: ", "Variante." at the very start only
_LEADING_VARIANT_RE = re.compile(r'^Variante\s*\d*\s*[:.\-]?\s*', re.IGNORECASE)
# Bare "Variante 3" left mid-sentence
_RESIDUAL_VARIANT_RE = re.compile(r'Variante\s*\d*', re.IGNORECASE)
_WHITESPACE_RE = re.compile(r'\s+')


class TextCleaner:
    """Strips variant markup and whitespace noise from question text"""

    @staticmethod
    def remove_variant_markers(text: str) -> str:
        """
        Remove every "Variante" annotation from a question.

        Handles, in this order:
        - "(Variante 1)" anywhere
        - "Variante 2 :" at the start
        - "Variante" / "Variante 3" anywhere else

        The residual pass is repeated until nothing matches, since removing
        one marker can splice the halves of another together.
        """
        text = _PARENTHESIZED_VARIANT_RE.sub('', text)
        text = _LEADING_VARIANT_RE.sub('', text)
        previous = None
        while previous != text:
            previous = text
            text = _RESIDUAL_VARIANT_RE.sub('', text)
        return text

    @classmethod
    def normalize(cls, raw: Any) -> str:
        """
        Canonical comparison form of a raw question string.

        Never raises: None yields the empty string and other values are
        converted with str().
        """
        if raw is None:
            return ""
        text = raw if isinstance(raw, str) else str(raw)

        text = cls.remove_variant_markers(text)
        text = _WHITESPACE_RE.sub(' ', text)
        return text.strip()

    @classmethod
    def canonical_key(cls, raw: Any) -> str:
        """Lower-cased normalized text, used only to detect duplicates"""
        return cls.normalize(raw).lower()


def normalize(raw: Any) -> str:
    """Module-level shortcut for TextCleaner.normalize"""
    return TextCleaner.normalize(raw)


def canonical_key(raw: Any) -> str:
    """Module-level shortcut for TextCleaner.canonical_key"""
    return TextCleaner.canonical_key(raw)
