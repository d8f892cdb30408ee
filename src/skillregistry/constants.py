"""
Shared constants for skillregistry.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Matching defaults
DEFAULT_TERM_WEIGHT = 1
"""Score added for each distinct query term found in a skill's triggers."""

DEFAULT_PHRASE_WEIGHT = 2
"""Score added for each stored multi-word phrase found verbatim in the query."""

DEFAULT_QUERY_LIMIT = 5
"""Default maximum number of matches returned by a query."""

DEFAULT_STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "any",
        "are",
        "as",
        "at",
        "be",
        "by",
        "for",
        "from",
        "i",
        "if",
        "in",
        "into",
        "is",
        "it",
        "its",
        "of",
        "on",
        "or",
        "so",
        "that",
        "the",
        "this",
        "to",
        "was",
        "when",
        "while",
        "with",
    }
)
"""Words dropped during normalization of descriptions and queries."""

# Phrase extraction
PHRASE_DELIMITERS = ",;"
"""Characters that separate clauses (candidate phrases) in a description."""

# Skill documents
SKILL_FILENAME = "SKILL.md"
"""Name of the file that defines a skill inside its directory."""

SKILL_BODY_SOFT_LIMIT = 500
"""Soft limit for SKILL.md body length, in lines."""

# Environment variables
ENV_PREFIX = "SKILLREGISTRY_"
"""Prefix for all environment variables read by Settings."""

ENV_SKILL_PATH = "SKILLREGISTRY_SKILL_PATH"
"""Colon-separated list of extra skill search paths."""

ENV_CONFIG_DIR = "SKILLREGISTRY_CONFIG_DIR"
"""Override for the user configuration directory."""
