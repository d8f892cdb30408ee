"""
Text normalization shared by the store, the trigger index and the matcher.

Descriptions and queries go through the same TextNormalizer so that a
term extracted at load time compares equal to the same word typed in a
query. The stop-word list is configuration: callers pass it in explicitly
(usually via Settings.build_normalizer()) rather than relying on module
state.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import re as _re

import skillregistry.constants as constants

_APOSTROPHE_RE = _re.compile(r"['’]")
_PUNCTUATION_RE = _re.compile(r"[^\w\s]")
_SLUG_RE = _re.compile(r"[^a-z0-9]+")


@_dataclasses.dataclass(frozen=True)
class TextNormalizer:
    """
    Turns free text into normalized terms and phrases.

    Normalization: lowercase, drop apostrophes, replace any other
    punctuation with whitespace, split on whitespace, drop stop words.
    """

    stop_words: frozenset[str] = constants.DEFAULT_STOP_WORDS
    """Words removed from every normalized term sequence."""

    phrase_delimiters: str = constants.PHRASE_DELIMITERS
    """Characters splitting a description into candidate phrases."""

    def terms(self, text: str) -> list[str]:
        """
        Normalize text into an ordered list of terms.

        Duplicates are kept so callers can scan contiguous windows.
        """
        lowered = _APOSTROPHE_RE.sub("", text.lower())
        cleaned = _PUNCTUATION_RE.sub(" ", lowered)
        return [word for word in cleaned.split() if word not in self.stop_words]

    def term_set(self, text: str) -> frozenset[str]:
        """Distinct normalized terms of text."""
        return frozenset(self.terms(text))

    def key(self, text: str) -> str:
        """Normalized lookup key: terms joined by single spaces."""
        return " ".join(self.terms(text))

    def clauses(self, text: str) -> list[str]:
        """
        Split raw text into clauses on the phrase delimiters.

        Text containing no delimiter has no clauses.
        """
        if not self.phrase_delimiters:
            return []
        pattern = "[" + _re.escape(self.phrase_delimiters) + "]"
        parts = _re.split(pattern, text)
        return parts if len(parts) > 1 else []

    def phrases(self, text: str) -> frozenset[str]:
        """
        Extract multi-word phrases from text.

        Each comma- or semicolon-delimited clause is normalized; clauses
        with at least two remaining terms become phrases. Undelimited
        text yields no phrases.
        """
        found: set[str] = set()
        for clause in self.clauses(text):
            clause_terms = self.terms(clause)
            if len(clause_terms) >= 2:
                found.add(" ".join(clause_terms))
        return frozenset(found)

    def triggers(self, text: str) -> frozenset[str]:
        """All triggers for a description: single terms plus phrases."""
        return self.term_set(text) | self.phrases(text)


def is_phrase(trigger: str) -> bool:
    """Whether a normalized trigger is a multi-word phrase."""
    return " " in trigger


def slugify(name: str) -> str:
    """
    Derive a stable skill id from a display name.

    "Laravel Sail" -> "laravel-sail". Returns an empty string when the name
    has no alphanumeric characters.
    """
    return _SLUG_RE.sub("-", name.lower()).strip("-")
